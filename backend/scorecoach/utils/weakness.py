from typing import Dict, List, Optional

from scorecoach.models.report_models import PerformanceReport
from scorecoach.settings import get_settings
from scorecoach.utils.taxonomy import SECTION_NAMES, default_topics


def weak_topics(report: PerformanceReport, section: str, threshold: Optional[int] = None) -> List[str]:
    """
    Topics of `section` the student should practise, most urgent first.

    A topic is weak when its recorded difficulty is Hard, or when the section
    has more than `threshold` incorrect answers. Falls back to the section's
    full default topic list, so a known section never yields an empty list.
    """
    if threshold is None:
        threshold = get_settings().weak_incorrect_threshold

    defaults = list(default_topics(section))
    recorded = report.topic_difficulty.get(section, {})
    hard = [topic for topic, info in recorded.items() if info.difficulty == "Hard"]

    if report.section_incorrect(section) > threshold:
        # every topic qualifies; keep the Hard ones in front
        ordered = hard + [t for t in defaults if t not in hard]
    else:
        ordered = hard

    weak = list(dict.fromkeys(ordered))
    return weak or defaults


def weak_topics_by_section(report: PerformanceReport, threshold: Optional[int] = None) -> Dict[str, List[str]]:
    return {section: weak_topics(report, section, threshold) for section in SECTION_NAMES}
