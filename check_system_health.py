import random
import sys

from drumfeed.errors import RecordInvariantError
from drumfeed.mutation.mutator import evolve

# ANSI Colors
OK = '\033[92m'
FAIL = '\033[91m'
RESET = '\033[0m'

ROUNDS = 25


def audit_evolution_chain(seed=None):
    print(f"\n=== SNAPSHOT EVOLUTION AUDIT ({ROUNDS} rounds) ===\n")

    rng = random.Random(seed)
    snapshot = []
    passed_count = 0

    for round_no in range(1, ROUNDS + 1):
        target = rng.randint(0, 200)
        print(f"Round {round_no:2d} -> {target:3d} records...", end=" ")

        snapshot = evolve(snapshot, target, rng)

        if len(snapshot) != target:
            print(f"{FAIL}FAIL (got {len(snapshot)} records){RESET}")
            continue

        try:
            for record in snapshot:
                record.check_invariants()
        except RecordInvariantError as e:
            print(f"{FAIL}FAIL ({e.invariant}){RESET}")
            continue

        print(f"{OK}PASS{RESET}")
        passed_count += 1

    print(f"\nStatus: {passed_count}/{ROUNDS} Rounds Intact.")
    if passed_count == ROUNDS:
        print(f"{OK}SNAPSHOT INTEGRITY: 100%{RESET}")
    else:
        print(f"{FAIL}SNAPSHOT INTEGRITY BROKEN{RESET}")
    return passed_count == ROUNDS


if __name__ == "__main__":
    seed = int(sys.argv[1]) if len(sys.argv) > 1 else None
    sys.exit(0 if audit_evolution_chain(seed) else 1)
