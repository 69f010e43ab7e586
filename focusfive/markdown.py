"""
Markdown codec for daily goal files.

Canonical shape:

    # January 15, 2025 - Day 12

    ## Work (Goal: Ship MVP)
    - [x] Fix critical bugs
    - [ ]
    - [ ]
    ## Reflection
    Good focus today.

    ## Health
    ...

Parsing strategy:
1. Locate the first `# <Month> <D>, <YYYY>` line; everything before it is ignored.
2. `## Work|Health|Family` (any case) opens a domain; `(Goal: ...)` is its goal.
3. `- [ ]` / `- [x]` lines become actions, capped at five per domain.
4. `## Reflection` under a domain collects the following lines up to the next heading;
   reflection lines that would read as headings are written with a leading backslash.
Anything else is tolerated and dropped.
"""
import re
from datetime import date
from typing import Dict, List, Optional

from focusfive.config import LIMITS
from focusfive.exceptions import InvalidFormat
from focusfive.logger import get_logger
from focusfive.models import Action, DailyGoals, OUTCOME_ORDER, Outcome, OutcomeType, trim_blank_lines

logger = get_logger("markdown")

MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]

_MONTHS: Dict[str, int] = {}
for _number, _name in enumerate(MONTH_NAMES, start=1):
    _MONTHS[_name.lower()] = _number
    _MONTHS[_name[:3].lower()] = _number
_MONTHS["sept"] = 9

DATE_HEADER_RE = re.compile(r"^#\s+([A-Za-z]+)\.?\s+(\d{1,2}),\s*(\d{4})\b(.*)$")
DAY_NUMBER_RE = re.compile(r"^\s*-\s*Day\s+(\d+)", re.IGNORECASE)
SECTION_RE = re.compile(r"^##\s+(work|health|family)\b(.*)$", re.IGNORECASE)
GOAL_RE = re.compile(r"\(\s*Goal:\s*(.*)\)\s*$", re.IGNORECASE)
REFLECTION_RE = re.compile(r"^#{2,3}\s+reflection\b", re.IGNORECASE)
# Level-1/2 headings end the current section
HEADING_RE = re.compile(r"^#{1,2}(\s|$)")
ACTION_RE = re.compile(r"^- \[([ xX])\](?: (.*))?$")

NO_DATE_HEADER = "No valid date header"


def format_date_header(day: date, day_number: Optional[int] = None) -> str:
    """Render `# January 15, 2025[ - Day N]` independent of the locale."""
    header = f"# {MONTH_NAMES[day.month - 1]} {day.day}, {day.year:04d}"
    if day_number is not None:
        header += f" - Day {day_number}"
    return header


def parse_date_header(line: str) -> Optional[date]:
    """Return the date carried by a header line, or None if it is not one."""
    match = DATE_HEADER_RE.match(line.strip())
    if not match:
        return None
    month = _MONTHS.get(match.group(1).lower())
    if month is None:
        return None
    try:
        return date(int(match.group(3)), month, int(match.group(2)))
    except ValueError:
        return None


def extract_day_number(header: str) -> Optional[int]:
    match = DATE_HEADER_RE.match(header.strip())
    if not match:
        return None
    day_match = DAY_NUMBER_RE.match(match.group(4))
    return int(day_match.group(1)) if day_match else None


def extract_goal(rest: str) -> Optional[str]:
    """Goal text from the remainder of a section header, e.g. ` (Goal: Ship v1)`."""
    match = GOAL_RE.search(rest)
    if not match:
        return None
    goal = match.group(1).strip()
    return goal or None


def parse_action_line(line: str) -> Optional[Action]:
    match = ACTION_RE.match(line)
    if not match:
        return None
    completed = match.group(1) in ("x", "X")
    text = (match.group(2) or "").rstrip()
    return Action.from_markdown(text, completed)


class _Section:
    """Accumulates one domain while parsing."""

    def __init__(self, outcome_type: OutcomeType):
        self.outcome_type = outcome_type
        self.goal: Optional[str] = None
        self.actions: List[Action] = []
        self.reflection_lines: List[str] = []

    def to_outcome(self) -> Outcome:
        actions = list(self.actions)
        while len(actions) < LIMITS.DEFAULT_ACTIONS:
            actions.append(Action.new_empty())
        reflection = "\n".join(trim_blank_lines(self.reflection_lines))
        return Outcome(
            outcome_type=self.outcome_type,
            goal=self.goal,
            actions=actions,
            reflection=reflection or None,
        )


def parse_markdown(content: str) -> DailyGoals:
    """
    Parse a daily goals markdown document.

    Args:
        content: full file text

    Returns:
        DailyGoals with fresh action ids; capped extra actions are reported
        in `goals.warnings`.

    Raises:
        InvalidFormat: if no line is a valid date header
    """
    lines = content.splitlines()

    header_index = None
    goals_date = None
    for i, line in enumerate(lines):
        goals_date = parse_date_header(line)
        if goals_date is not None:
            header_index = i
            break

    if header_index is None:
        raise InvalidFormat(NO_DATE_HEADER, hint="Expected a header such as '# January 15, 2025'")

    warnings: List[str] = []
    sections: Dict[OutcomeType, _Section] = {}
    current: Optional[_Section] = None
    in_reflection = False

    for line_number, raw in enumerate(lines[header_index + 1:], start=header_index + 2):
        line = raw.strip()

        section_match = SECTION_RE.match(line)
        if section_match:
            outcome_type = OutcomeType(section_match.group(1).capitalize())
            current = sections.setdefault(outcome_type, _Section(outcome_type))
            goal = extract_goal(section_match.group(2))
            if goal is not None:
                current.goal = goal
            in_reflection = False
            continue

        if REFLECTION_RE.match(line):
            in_reflection = current is not None
            continue

        if HEADING_RE.match(line):
            current = None
            in_reflection = False
            continue

        if current is None:
            continue

        if in_reflection:
            current.reflection_lines.append(unescape_reflection_line(raw))
            continue

        if not line:
            continue

        action = parse_action_line(line)
        if action is None:
            continue

        if len(current.actions) >= LIMITS.MAX_ACTIONS:
            message = (
                f"Line {line_number}: more than {LIMITS.MAX_ACTIONS} actions for "
                f"{current.outcome_type.value}, ignoring: {line}"
            )
            logger.warning(message)
            warnings.append(message)
            continue

        current.actions.append(action)

    outcomes = {
        outcome_type: (sections[outcome_type].to_outcome()
                       if outcome_type in sections else Outcome(outcome_type))
        for outcome_type in OUTCOME_ORDER
    }

    return DailyGoals(
        date=goals_date,
        day_number=extract_day_number(lines[header_index]),
        work=outcomes[OutcomeType.WORK],
        health=outcomes[OutcomeType.HEALTH],
        family=outcomes[OutcomeType.FAMILY],
        warnings=warnings,
    )


def _single_line(text: str) -> str:
    return " ".join(text.splitlines())


def escape_reflection_line(line: str) -> str:
    """Prefix `\\` to lines the parser would read as headings (and to lines already starting with `\\`)."""
    stripped = line.lstrip()
    if stripped.startswith("#") or line.startswith("\\"):
        return "\\" + line
    return line


def unescape_reflection_line(line: str) -> str:
    return line[1:] if line.startswith("\\") else line


def generate_outcome_section(outcome: Outcome) -> str:
    """Markdown for a single domain: header, actions, optional reflection."""
    header = f"## {outcome.outcome_type.value}"
    if outcome.goal:
        header += f" (Goal: {_single_line(outcome.goal)})"

    lines = [header]
    for action in outcome.actions:
        checkbox = "[x]" if action.completed else "[ ]"
        lines.append(f"- {checkbox} {_single_line(action.text)}")

    reflection_lines = trim_blank_lines((outcome.reflection or "").splitlines())
    if reflection_lines:
        lines.append("## Reflection")
        lines.extend(escape_reflection_line(line) for line in reflection_lines)

    return "\n".join(lines)


def generate_markdown(goals: DailyGoals) -> str:
    """Render DailyGoals to the canonical markdown; `\\n` endings, final newline."""
    parts = [format_date_header(goals.date, goals.day_number)]
    parts.extend(generate_outcome_section(outcome) for outcome in goals.outcomes())
    return "\n\n".join(parts) + "\n"
