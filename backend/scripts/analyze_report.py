import os, sys
BASE = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if BASE not in sys.path:
    sys.path.insert(0, BASE)
from scorecoach.question_pipeline import analyze_report
import pprint

def main():
    if len(sys.argv) < 2:
        print("Usage: analyze_report.py <report.txt>")
        sys.exit(1)

    with open(sys.argv[1], encoding="utf-8") as f:
        text = f.read()

    analysis = analyze_report(text)
    if not analysis.recognized:
        print("⚠️  This does not look like a score report; results may be empty.")

    pprint.pprint(analysis.report.model_dump())
    print("Weak topics:")
    pprint.pprint(analysis.weak_topics)
    print("Allocation:", analysis.allocation)
    for warning in analysis.report.warnings:
        print("⚠️ ", warning)

if __name__ == "__main__":
    main()
