"""
Test taxonomy: the two report sections and the four topics inside each.

The topic -> section table is fixed for score-report compatibility and is
built once at import as read-only mappings.
"""
import re
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional, Tuple


class Section(str, Enum):
    READING_WRITING = "Reading and Writing"
    MATH = "Math"


class Topic(str, Enum):
    INFORMATION_AND_IDEAS = "Information and Ideas"
    CRAFT_AND_STRUCTURE = "Craft and Structure"
    EXPRESSION_OF_IDEAS = "Expression of Ideas"
    STANDARD_ENGLISH_CONVENTIONS = "Standard English Conventions"
    ALGEBRA = "Algebra"
    ADVANCED_MATH = "Advanced Math"
    PROBLEM_SOLVING_AND_DATA_ANALYSIS = "Problem-Solving and Data Analysis"
    GEOMETRY_AND_TRIGONOMETRY = "Geometry and Trigonometry"


SECTION_TOPICS: Mapping[Section, Tuple[Topic, ...]] = MappingProxyType({
    Section.READING_WRITING: (
        Topic.INFORMATION_AND_IDEAS,
        Topic.CRAFT_AND_STRUCTURE,
        Topic.EXPRESSION_OF_IDEAS,
        Topic.STANDARD_ENGLISH_CONVENTIONS,
    ),
    Section.MATH: (
        Topic.ALGEBRA,
        Topic.ADVANCED_MATH,
        Topic.PROBLEM_SOLVING_AND_DATA_ANALYSIS,
        Topic.GEOMETRY_AND_TRIGONOMETRY,
    ),
})

TOPIC_SECTIONS: Mapping[Topic, Section] = MappingProxyType({
    topic: section
    for section, topics in SECTION_TOPICS.items()
    for topic in topics
})

SECTION_NAMES: Tuple[str, ...] = tuple(s.value for s in Section)


def flexible_pattern(name: str) -> str:
    """Regex for `name` tolerating any run of whitespace between words."""
    return r"\s+".join(re.escape(word) for word in name.split())


def canonical_section(name: str) -> Optional[str]:
    """Map a matched section label (any case/spacing) to its canonical name."""
    squashed = " ".join(name.split()).lower()
    for section in Section:
        if section.value.lower() == squashed:
            return section.value
    return None


def default_topics(section: str) -> Tuple[str, ...]:
    try:
        return tuple(t.value for t in SECTION_TOPICS[Section(section)])
    except ValueError:
        return ()


def section_for_topic(topic: str) -> Optional[str]:
    try:
        return TOPIC_SECTIONS[Topic(topic)].value
    except ValueError:
        return None
