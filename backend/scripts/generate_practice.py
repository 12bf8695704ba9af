import os, sys
BASE = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if BASE not in sys.path:
    sys.path.insert(0, BASE)
from scorecoach.question_pipeline import DEFAULT_COUNT, USE_DEFAULT, run_pipeline
import json

def main():
    args = [a for a in sys.argv[1:] if a != "--offline"]
    offline = "--offline" in sys.argv[1:]
    if not args:
        print("Usage: generate_practice.py <report.txt> [count] [--offline]")
        sys.exit(1)

    count = int(args[1]) if len(args) > 1 else DEFAULT_COUNT
    with open(args[0], encoding="utf-8") as f:
        text = f.read()

    # --offline skips the generation service entirely
    result = run_pipeline(text, count, generator=None if offline else USE_DEFAULT)
    print(json.dumps([q.model_dump() for q in result.questions], indent=2))
    print(f"✅  {len(result.questions)} questions ({result.source})", file=sys.stderr)

if __name__ == "__main__":
    main()
