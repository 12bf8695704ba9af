"""
Static practice-question bank used when the generation service is
unavailable or returns too few questions.

FALLBACK_TEMPLATES maps (Section, Topic) to a handful of complete question
templates. generate_fallback_questions() picks from it deterministically:
weak topics of the sections the student missed questions in come first, then
every topic is cycled until exactly `count` questions exist.
"""
import threading
import time
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

from scorecoach.models.question_models import GeneratedQuestion
from scorecoach.models.report_models import PerformanceReport
from scorecoach.utils.prompt_templates import allocate_questions
from scorecoach.utils.taxonomy import SECTION_NAMES, Section, Topic
from scorecoach.utils.weakness import weak_topics

TemplateKey = Tuple[Section, Topic]


def _q(qid, topic, difficulty, text, options, answer, explanation):
    return GeneratedQuestion(
        id=qid,
        text=text,
        topic=topic.value,
        difficulty=difficulty,
        options=options,
        answer=answer,
        explanation=explanation,
    )


_INFO = Topic.INFORMATION_AND_IDEAS
_CRAFT = Topic.CRAFT_AND_STRUCTURE
_EXPR = Topic.EXPRESSION_OF_IDEAS
_CONV = Topic.STANDARD_ENGLISH_CONVENTIONS
_ALG = Topic.ALGEBRA
_ADV = Topic.ADVANCED_MATH
_DATA = Topic.PROBLEM_SOLVING_AND_DATA_ANALYSIS
_GEO = Topic.GEOMETRY_AND_TRIGONOMETRY

FALLBACK_TEMPLATES: Mapping[TemplateKey, Tuple[GeneratedQuestion, ...]] = MappingProxyType({
    (Section.READING_WRITING, _INFO): (
        _q("rw-info-1", _INFO, "Easy",
           "Marine biologist Lena Ortiz argues that coastal communities should help design ocean "
           "conservation rules, because residents often know details about local fish populations "
           "that visiting scientists miss. Which choice best states the main idea of the text?",
           ["Scientists know very little about fish populations.",
            "Local residents' knowledge makes them valuable partners in conservation planning.",
            "Coastal communities usually oppose conservation rules.",
            "Fish populations are declining in every coastal region."],
           "B",
           "The text's claim is that residents should be involved because of what they know."),
        _q("rw-info-2", _INFO, "Hard",
           "Researchers found that great tits living near highways sing at a higher pitch than great "
           "tits living in quiet forests. They concluded that the birds raise their pitch so their "
           "songs can be heard over low-frequency traffic noise. Which finding, if true, would most "
           "directly support the researchers' conclusion?",
           ["Forest great tits sing more often in the morning than in the evening.",
            "Great tits near highways lowered their pitch on days the highway was closed.",
            "Great tits near highways have shorter wings than forest great tits.",
            "Several other bird species also nest near highways."],
           "B",
           "If pitch drops when the noise disappears, the noise is the likely cause of the higher pitch."),
        _q("rw-info-3", _INFO, "Medium",
           "A table lists average monthly rainfall in Dover Falls: March 3.1 inches, April 4.2 inches, "
           "May 2.6 inches. A student claims that rainfall in Dover Falls peaks in the middle month of "
           "spring. Which choice uses data from the table to support the claim?",
           ["April had the most rainfall of the three months, 4.2 inches.",
            "March had 3.1 inches of rainfall.",
            "May had less rainfall than March.",
            "Rainfall in the table is measured in inches."],
           "A",
           "Only choice A shows that April, the middle month, had the highest value."),
        _q("rw-info-4", _INFO, "Hard",
           "In a study of 200 commuters, those who bicycled to work reported lower stress than those "
           "who drove. The bicyclists also lived, on average, much closer to their workplaces. "
           "Therefore, the study ______. Which choice most logically completes the text?",
           ["proves that bicycling reduces stress",
            "shows that driving is the most stressful way to commute",
            "cannot by itself show that bicycling, rather than a shorter commute, lowered stress",
            "suggests that all commuters should move closer to work"],
           "C",
           "Commute distance is a second difference between the groups, so the cause is not isolated."),
    ),
    (Section.READING_WRITING, _CRAFT): (
        _q("rw-craft-1", _CRAFT, "Easy",
           "The committee's decision was not arbitrary: each member ______ the evidence carefully "
           "before voting. Which choice completes the text with the most logical and precise word?",
           ["ignored", "scrutinized", "invented", "postponed"],
           "B",
           "'Scrutinized' means examined closely, which matches 'carefully' and 'not arbitrary'."),
        _q("rw-craft-2", _CRAFT, "Medium",
           "Although the novelist's early work was praised for its ornate language, her later books "
           "are strikingly ______, relying on short sentences and plain vocabulary. Which choice "
           "completes the text with the most logical and precise word?",
           ["elaborate", "austere", "verbose", "ambiguous"],
           "B",
           "'Austere' (severely simple) contrasts with 'ornate' and fits short, plain sentences."),
        _q("rw-craft-3", _CRAFT, "Medium",
           "Many people assume that deserts are nearly lifeless. In fact, the Sonoran Desert supports "
           "more than 2,000 plant species. Some, like the saguaro cactus, store water in expanding "
           "tissue that lets them survive months without rain. Which choice best describes the "
           "overall structure of the text?",
           ["It presents a common assumption and then offers evidence that challenges it.",
            "It describes a problem and then proposes a solution to it.",
            "It compares two deserts and explains why one has more plants.",
            "It narrates a scientist's journey through the desert."],
           "A",
           "The text opens with an assumption ('nearly lifeless') and then refutes it with evidence."),
        _q("rw-craft-4", _CRAFT, "Hard",
           "The city expanded its bus network in 2019, and ridership rose 12 percent the following "
           "year. Planners note, however, that fares were also cut in 2019, so the expansion alone "
           "may not explain the increase. Which choice best describes the function of the last "
           "sentence in the text?",
           ["It qualifies the apparent cause of a trend described earlier.",
            "It provides additional ridership data for 2019.",
            "It states the main claim that the rest of the text supports.",
            "It contradicts the reported increase in ridership."],
           "A",
           "The fare cut is offered as another possible cause, limiting the credit given to expansion."),
    ),
    (Section.READING_WRITING, _EXPR): (
        _q("rw-expr-1", _EXPR, "Easy",
           "Solar panels have become far cheaper over the past decade. ______, many homeowners still "
           "hesitate to install them because of upfront installation costs. Which choice completes "
           "the text with the most logical transition?",
           ["Therefore", "Similarly", "Nevertheless", "For example"],
           "C",
           "The second sentence contrasts with the first, so a contrasting transition is needed."),
        _q("rw-expr-2", _EXPR, "Easy",
           "The first step of the experiment was to measure the starting temperature of the water. "
           "______, the students added salt in 5-gram increments. Which choice completes the text "
           "with the most logical transition?",
           ["Subsequently", "In contrast", "Regardless", "Likewise"],
           "A",
           "The sentences describe steps in order, so a sequence transition fits."),
        _q("rw-expr-3", _EXPR, "Medium",
           "While researching a topic, a student took these notes: the Great Wall of China was built "
           "over many centuries; its total length, including all branches, is about 21,196 km; most "
           "surviving sections date from the Ming dynasty. The student wants to emphasize the wall's "
           "size. Which choice most effectively uses relevant information from the notes?",
           ["Including all of its branches, the Great Wall of China stretches about 21,196 km.",
            "Most surviving sections of the Great Wall date from the Ming dynasty.",
            "The Great Wall of China was built over many centuries.",
            "The Great Wall of China is one of the world's most famous structures."],
           "A",
           "Only choice A reports the wall's length, which conveys its size."),
        _q("rw-expr-4", _EXPR, "Medium",
           "Tardigrades can survive extreme cold. ______, some have been revived after being frozen "
           "for three decades. Which choice completes the text with the most logical transition?",
           ["However", "In fact", "Instead", "Otherwise"],
           "B",
           "The second sentence strengthens the first with a striking example, so 'In fact' fits."),
    ),
    (Section.READING_WRITING, _CONV): (
        _q("rw-conv-1", _CONV, "Easy",
           "The collection of rare books ______ donated to the university library last spring. "
           "Which choice completes the text so that it conforms to the conventions of Standard English?",
           ["were", "have been", "was", "are"],
           "C",
           "The subject is the singular 'collection', and the action happened in the past."),
        _q("rw-conv-2", _CONV, "Medium",
           "The hikers packed three ______ water, a map, and a first-aid kit. Which choice completes "
           "the text so that it conforms to the conventions of Standard English?",
           ["essentials;", "essentials:", "essentials,", "essentials"],
           "B",
           "A colon introduces a list that explains the preceding independent clause."),
        _q("rw-conv-3", _CONV, "Medium",
           "Each of the students ______ responsible for bringing a calculator to the exam. Which "
           "choice completes the text so that it conforms to the conventions of Standard English?",
           ["are", "were", "is", "be"],
           "C",
           "'Each' is singular, so it takes the singular verb 'is'."),
        _q("rw-conv-4", _CONV, "Hard",
           "Walking into the gallery, ______ Which choice completes the text so that it conforms to "
           "the conventions of Standard English?",
           ["the paintings impressed the visitors.",
            "the visitors were impressed by the paintings.",
            "the visitors' impression of the paintings was strong.",
            "there was an impressive set of paintings."],
           "B",
           "The modifier 'Walking into the gallery' must be followed by who was walking: the visitors."),
    ),
    (Section.MATH, _ALG): (
        _q("math-alg-1", _ALG, "Easy",
           "If 4x - 9 = 23, what is the value of x?",
           ["6", "7", "8", "9"],
           "C",
           "Add 9 to both sides to get 4x = 32, then divide by 4."),
        _q("math-alg-2", _ALG, "Easy",
           "A gym charges a one-time fee of $40 plus $25 per month. Which equation gives the total "
           "cost C, in dollars, of a membership for m months?",
           ["C = 40m + 25", "C = 25m + 40", "C = 65m", "C = 25(m + 40)"],
           "B",
           "The monthly charge multiplies m and the one-time fee is added once."),
        _q("math-alg-3", _ALG, "Medium",
           "x + y = 10 and 2x - y = 5. What is the value of x?",
           ["3", "4", "5", "6"],
           "C",
           "Adding the equations gives 3x = 15, so x = 5."),
        GeneratedQuestion(
            id="math-alg-4",
            text="What is the y-intercept of the line 3x + 2y = 12 in the xy-plane? (Enter the y-coordinate.)",
            topic=_ALG.value,
            difficulty="Medium",
            answer="6",
            explanation="Set x = 0: 2y = 12, so y = 6.",
        ),
    ),
    (Section.MATH, _ADV): (
        _q("math-adv-1", _ADV, "Easy",
           "What are the solutions to x^2 - 5x + 6 = 0?",
           ["x = 1 and x = 6", "x = 2 and x = 3", "x = -2 and x = -3", "x = -1 and x = 6"],
           "B",
           "The quadratic factors as (x - 2)(x - 3) = 0."),
        _q("math-adv-2", _ADV, "Easy",
           "If f(x) = 2x^2 - 3, what is the value of f(-2)?",
           ["-11", "-5", "5", "11"],
           "C",
           "f(-2) = 2(4) - 3 = 5."),
        _q("math-adv-3", _ADV, "Medium",
           "A population of bacteria doubles every 3 hours. If there are 500 bacteria now, which "
           "expression gives the number of bacteria after t hours?",
           ["500(2)^(t/3)", "500(3)^(t/2)", "500(2)^(3t)", "1000t/3"],
           "A",
           "The population is multiplied by 2 once for every 3 hours, that is t/3 times."),
        GeneratedQuestion(
            id="math-adv-4",
            text="The function g is defined by g(x) = (x - 4)(x + 1). For what value of x does g(x) "
                 "reach its minimum value?",
            topic=_ADV.value,
            difficulty="Hard",
            answer="1.5",
            explanation="The vertex lies midway between the zeros 4 and -1, at x = 3/2.",
        ),
    ),
    (Section.MATH, _DATA): (
        _q("math-data-1", _DATA, "Easy",
           "A shirt originally priced at $40 is on sale for 25% off. What is the sale price?",
           ["$10", "$15", "$30", "$35"],
           "C",
           "25% of $40 is $10, and $40 - $10 = $30."),
        _q("math-data-2", _DATA, "Medium",
           "The mean of five numbers is 12. Four of the numbers are 10, 11, 13 and 14. What is the "
           "fifth number?",
           ["10", "12", "14", "16"],
           "B",
           "The five numbers sum to 60; the four given sum to 48, leaving 12."),
        _q("math-data-3", _DATA, "Easy",
           "A car travels 150 miles on 5 gallons of gas. At this rate, how many gallons are needed "
           "to travel 420 miles?",
           ["12", "13", "14", "15"],
           "C",
           "The car gets 30 miles per gallon, and 420 / 30 = 14."),
        _q("math-data-4", _DATA, "Medium",
           "In a survey of 400 randomly selected students at a school, 120 said they walk to school. "
           "The school has 2,000 students. Which is the best estimate of the number of students at "
           "the school who walk to school?",
           ["120", "400", "600", "800"],
           "C",
           "30% of the sample walks, and 30% of 2,000 is 600."),
    ),
    (Section.MATH, _GEO): (
        _q("math-geo-1", _GEO, "Easy",
           "A right triangle has legs of length 6 and 8. What is the length of the hypotenuse?",
           ["7", "10", "12", "14"],
           "B",
           "By the Pythagorean theorem, 6^2 + 8^2 = 100, so the hypotenuse is 10."),
        _q("math-geo-2", _GEO, "Medium",
           "In right triangle ABC, angle C measures 90 degrees. If sin A = 3/5, what is cos A?",
           ["3/4", "4/5", "5/3", "5/4"],
           "B",
           "The sides are in a 3-4-5 ratio, so the side adjacent to A is 4 and cos A = 4/5."),
        GeneratedQuestion(
            id="math-geo-3",
            text="A circle in the xy-plane has equation (x - 2)^2 + (y + 3)^2 = 49. What is the "
                 "radius of the circle?",
            topic=_GEO.value,
            difficulty="Medium",
            answer="7",
            explanation="The right side of the standard form equals r^2, and the square root of 49 is 7.",
        ),
        _q("math-geo-4", _GEO, "Medium",
           "Two angles are supplementary, and the measure of one is 3 times the measure of the other. "
           "What is the measure, in degrees, of the larger angle?",
           ["45", "90", "120", "135"],
           "D",
           "x + 3x = 180 gives x = 45, so the larger angle is 135 degrees."),
    ),
})

TEMPLATE_KEYS: Tuple[TemplateKey, ...] = tuple(FALLBACK_TEMPLATES.keys())


def templates_for(section: str, topic: str) -> Tuple[GeneratedQuestion, ...]:
    try:
        return FALLBACK_TEMPLATES.get((Section(section), Topic(topic)), ())
    except ValueError:
        return ()


_stamp_lock = threading.Lock()
_last_stamp = 0


def _fresh_timestamp() -> int:
    """Milliseconds since the epoch, bumped so no two calls in this process share one."""
    global _last_stamp
    with _stamp_lock:
        now = int(time.time() * 1000)
        _last_stamp = now if now > _last_stamp else _last_stamp + 1
        return _last_stamp


class _Picker:
    """Round-robin over each key's templates; stamps every pick with a fresh id."""

    def __init__(self, timestamp: int):
        self.timestamp = timestamp
        self.used: Dict[TemplateKey, int] = {}
        self.picked: List[GeneratedQuestion] = []

    def pick(self, key: TemplateKey) -> None:
        templates = FALLBACK_TEMPLATES[key]
        n = self.used.get(key, 0)
        self.used[key] = n + 1
        template = templates[n % len(templates)]
        index = len(self.picked)
        self.picked.append(template.model_copy(update={"id": f"{template.id}-{self.timestamp}-{index}"}))


def generate_fallback_questions(
    report: Optional[PerformanceReport],
    count: int = 10,
    timestamp: Optional[int] = None,
) -> List[GeneratedQuestion]:
    if count <= 0:
        return []
    picker = _Picker(timestamp if timestamp is not None else _fresh_timestamp())

    if report is not None and report.has_data():
        allocation = allocate_questions(report, count)
        missed = [s for s in SECTION_NAMES if report.section_incorrect(s) > 0]
        # richest first; sorted() keeps taxonomy order on ties
        for section in sorted(missed, key=lambda s: -report.section_incorrect(s)):
            for topic in weak_topics(report, section):
                if not templates_for(section, topic):
                    continue
                remaining = count - len(picker.picked)
                quota = min(allocation.get(section, 0), report.section_incorrect(section), remaining)
                key = (Section(section), Topic(topic))
                for _ in range(quota):
                    picker.pick(key)

    # top up by cycling every topic of every section
    j = 0
    while len(picker.picked) < count:
        picker.pick(TEMPLATE_KEYS[j % len(TEMPLATE_KEYS)])
        j += 1

    return picker.picked
