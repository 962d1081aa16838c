"""Estimated vs real cost/value rollups - no I/O dependencies."""

from dataclasses import dataclass, field
from datetime import datetime

from .cost import calculate_cost
from .filters import event_tags, filter_events, filter_projects, in_months, known_tags, projects_by_id
from .models import Budget, Event, Project, ProjectStatus
from .timeutil import align

# Tag fragments marking a project as annual/recurring for proration
ANNUAL_KEYWORDS = ("anual", "mantenimiento", "fee", "recurrente", "social media", "rrss")

# Reference market rate for estimates, distinct from the internal budget rate
MARKET_RATE = 80.0
DEFAULT_HOURLY_RATE = 80.0


@dataclass(frozen=True)
class MonthRange:
    """Contiguous 0-based month selection within a year (0 = January)."""

    start: int = 0
    end: int = 11

    def __post_init__(self):
        if not 0 <= self.start <= self.end <= 11:
            raise ValueError(f"Invalid month range {self.start}-{self.end}")

    @property
    def months_selected(self) -> int:
        return max(1, self.end - self.start + 1)

    def contains(self, moment: datetime, year: int) -> bool:
        return in_months(moment, year, self.start, self.end)


@dataclass
class ProjectShare:
    """Whether a project counts for a selection, and with which weight."""

    in_range: bool
    factor: float


@dataclass
class Totals:
    """Cost and value accumulator."""

    estimated_value: float = 0
    estimated_cost: float = 0
    real_value: float = 0
    real_cost: float = 0
    real_production_cost: float = 0
    real_time_cost: float = 0

    def add(self, other: "Totals") -> None:
        self.estimated_value += other.estimated_value
        self.estimated_cost += other.estimated_cost
        self.real_value += other.real_value
        self.real_cost += other.real_cost
        self.real_production_cost += other.real_production_cost
        self.real_time_cost += other.real_time_cost


@dataclass
class Metrics:
    """Rollup for one year/month-range selection."""

    totals: Totals
    prorated_expenses: float
    months_selected: int
    by_tag: dict[str, Totals] = field(default_factory=dict)

    @property
    def estimated_margin(self) -> float:
        return self.totals.estimated_value - self.totals.estimated_cost - self.prorated_expenses

    @property
    def real_margin(self) -> float:
        return self.totals.real_value - self.totals.real_cost - self.prorated_expenses


def is_annual(project: Project, keywords: tuple[str, ...] | list[str] = ANNUAL_KEYWORDS) -> bool:
    """Any tag containing an annual keyword, case-insensitively."""
    return any(kw.lower() in tag.lower() for tag in project.tags for kw in keywords)


def project_factor(
    project: Project,
    year: int,
    months: MonthRange,
    keywords: tuple[str, ...] | list[str] = ANNUAL_KEYWORDS,
) -> ProjectShare:
    """
    Proration weight of a project for a selection.

    Annual projects count when ongoing or due within the year, prorated by
    months_selected / 12. One-off projects count in full when their deadline
    falls inside the selected year and months.
    """
    deadline = project.deadline

    if is_annual(project, keywords):
        this_year = deadline is not None and deadline.year == year
        if project.status is ProjectStatus.ONGOING or this_year:
            return ProjectShare(True, months.months_selected / 12)
        return ProjectShare(False, 0)

    if deadline is not None and months.contains(deadline, year):
        return ProjectShare(True, 1)
    return ProjectShare(False, 0)


def event_totals(
    event: Event,
    internal_rate: float,
    market_rate: float,
    as_of: datetime,
    recompute_real: bool = False,
) -> Totals:
    """
    Contribution of one event instance.

    Estimates only count for events not linked to a project (the project
    carries them). Real figures count once the event is done or started.
    """
    totals = Totals()
    multiplier = event.people
    independent = event.project_id is None

    if event.completed or align(event.date, as_of) < as_of:
        production = event.real_production_cost or 0
        if event.real_cost is not None and not recompute_real:
            totals.real_cost = event.real_cost
            totals.real_time_cost = max(0, event.real_cost - production)
        else:
            time_cost = event.real_time_cost
            if time_cost is None or recompute_real:
                time_cost = calculate_cost(event.duration, internal_rate, None, multiplier)
            totals.real_cost = production + time_cost
            totals.real_time_cost = time_cost
        totals.real_production_cost = production
        if independent:
            totals.real_value = event.real_value or 0

    if independent:
        estimate = calculate_cost(event.duration, market_rate, event.budgeted_cost, multiplier)
        totals.estimated_cost = estimate
        totals.estimated_value = event.budgeted_value if event.budgeted_value is not None else estimate

    return totals


def project_totals(project: Project, factor: float, market_rate: float) -> Totals:
    """Contribution of one project, scaled by its proration factor."""
    totals = Totals()

    if project.budgeted_cost is not None:
        estimate = project.budgeted_cost
    else:
        estimate = calculate_cost(f"{project.budgeted_hours or 0}h", market_rate)
    totals.estimated_cost = estimate * factor
    totals.estimated_value = (project.budgeted_value or 0) * factor

    if project.is_active:
        production = project.real_production_cost or 0
        if project.real_cost is not None:
            cost = project.real_cost
            time_cost = max(0, project.real_cost - production)
        else:
            time_cost = project.real_time_cost or 0
            cost = production + time_cost
        totals.real_cost = cost * factor
        totals.real_production_cost = production * factor
        totals.real_time_cost = time_cost * factor
        totals.real_value = (project.real_value or 0) * factor

    return totals


def compute_metrics(
    events: list[Event],
    projects: list[Project],
    budget: Budget,
    year: int,
    months: MonthRange | None = None,
    tags: list[str] | None = None,
    assignees: list[str] | None = None,
    as_of: datetime | None = None,
    market_rate: float = MARKET_RATE,
    default_hourly_rate: float = DEFAULT_HOURLY_RATE,
    annual_keywords: tuple[str, ...] | list[str] = ANNUAL_KEYWORDS,
    recompute_real: bool = False,
) -> Metrics:
    """
    Roll up estimated and real cost/value for a year and month range.

    Pure function - no I/O.

    Args:
        events: Expanded instances (typically one year's worth)
        projects: Full project collection
        budget: Internal hourly rate and fixed annual expenses
        year: Selected calendar year
        months: Selected month range, whole year by default
        tags: Tag filter; empty means all tags
        assignees: Assignee filter; empty means everyone
        as_of: Instant separating past from future events (defaults to now,
            in the zone of the events)
        market_rate: Reference rate for estimates
        default_hourly_rate: Internal rate when the budget sets none
        annual_keywords: Tag fragments that mark annual projects
        recompute_real: Ignore manual real costs on events

    Returns:
        Metrics with overall totals and the per-tag breakdown
    """
    months = months or MonthRange()
    if as_of is None:
        as_of = datetime.now(events[0].date.tzinfo if events else None)
    internal_rate = budget.rate_or(default_hourly_rate)

    in_period = [e for e in events if months.contains(e.date, year)]
    selected_events = filter_events(in_period, projects, tags, assignees)
    selected_projects = filter_projects(projects, tags, assignees)
    lookup = projects_by_id(projects)

    buckets = list(tags) if tags else known_tags(events, projects)
    by_tag = {t: Totals() for t in buckets}
    totals = Totals()

    for event in selected_events:
        contribution = event_totals(event, internal_rate, market_rate, as_of, recompute_real)
        totals.add(contribution)
        for tag in event_tags(event, lookup):
            if tag in by_tag:
                by_tag[tag].add(contribution)

    for project in selected_projects:
        share = project_factor(project, year, months, annual_keywords)
        if not share.in_range:
            continue
        contribution = project_totals(project, share.factor, market_rate)
        totals.add(contribution)
        for tag in dict.fromkeys(project.tags):
            if tag in by_tag:
                by_tag[tag].add(contribution)

    return Metrics(
        totals=totals,
        prorated_expenses=budget.annual_expenses / 12 * months.months_selected,
        months_selected=months.months_selected,
        by_tag=by_tag,
    )
