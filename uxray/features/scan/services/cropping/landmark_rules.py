"""
Which page region illustrates a finding.

Each table is an ordered list of (predicate, landmark) pairs. The first pair
whose predicate matches the finding and whose landmark was found on the page
wins; a finding with no such pair gets no crop.
"""
from typing import Callable, Optional, Sequence, Tuple, Union

from uxray.features.scan.schemas.analysis import IssueFinding, RecommendationFinding
from uxray.features.scan.schemas.snapshot import ElementBounds, Landmark, PageSnapshot

# Pseudo-landmark: the top band of the page
TOP_OF_PAGE = "top_of_page"
TOP_OF_PAGE_HEIGHT = 400

RECOMMENDATION_CROP_LIMIT = 3

Target = Union[Landmark, str]
Rule = Tuple[Callable[[str], bool], Target]


def _category(name: str) -> Callable[[str], bool]:
    return lambda category: category == name


def _keyword(*words: str) -> Callable[[str], bool]:
    return lambda title: any(word in title for word in words)


# Matched against the lower-cased, trimmed issue category
ISSUE_LANDMARK_RULES: Sequence[Rule] = (
    (_category("layout"), Landmark.navigation),
    (_category("layout"), Landmark.header),
    (_category("conversion"), Landmark.primary_cta),
    (_category("conversion"), Landmark.forms),
    (_category("accessibility"), Landmark.navigation),
    (_category("accessibility"), Landmark.main_content),
    (_category("mobile"), Landmark.header),
    (_category("mobile"), Landmark.navigation),
    (_category("performance"), TOP_OF_PAGE),
)

# Matched against the lower-cased recommendation title
RECOMMENDATION_LANDMARK_RULES: Sequence[Rule] = (
    (_keyword("button", "cta"), Landmark.primary_cta),
    (_keyword("nav"), Landmark.navigation),
    (_keyword("form"), Landmark.forms),
    (_keyword("header"), Landmark.header),
)


def resolve_target(target: Target, snapshot: PageSnapshot) -> Optional[ElementBounds]:
    if target == TOP_OF_PAGE:
        return ElementBounds(x=0, y=0, width=snapshot.viewport.width, height=TOP_OF_PAGE_HEIGHT)

    bounds = snapshot.element_bounds.get(target)
    if bounds is None or bounds.is_empty:
        return None
    return bounds


def match_rules(rules: Sequence[Rule], text: str, snapshot: PageSnapshot) -> Optional[ElementBounds]:
    for predicate, target in rules:
        if not predicate(text):
            continue
        bounds = resolve_target(target, snapshot)
        if bounds is not None:
            return bounds
    return None


def bounds_for_issue(issue: IssueFinding, snapshot: PageSnapshot) -> Optional[ElementBounds]:
    category = (issue.category or "").strip().lower()
    return match_rules(ISSUE_LANDMARK_RULES, category, snapshot)


def bounds_for_recommendation(rec: RecommendationFinding, snapshot: PageSnapshot) -> Optional[ElementBounds]:
    title = (rec.title or "").lower()
    return match_rules(RECOMMENDATION_LANDMARK_RULES, title, snapshot)
