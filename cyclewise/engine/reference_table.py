"""Static event coefficient reference table.

Each row gives the energy impact of an everyday activity on a roughly
-1..+1 scale: a ``base`` coefficient, a multiplier per cycle phase, a
multiplier per time of day, and a stress coefficient that scales the result
with the user's self-reported stress.

The table is embedded here so coefficient resolution works fully offline.
Canonical labels are matched case-insensitively; ``EVENT_ALIASES`` adds
common calendar phrasings for the fuzzy matcher.
"""

from __future__ import annotations

from dataclasses import dataclass

from cyclewise.engine.base import Phase, TimeOfDay


@dataclass(frozen=True)
class CoefficientTableRow:
    category: str
    event_type: str
    base: float
    menstrual: float
    follicular: float
    ovulation: float
    luteal: float
    morning: float
    afternoon: float
    evening: float
    stress_coefficient: float

    def phase_modifier(self, phase: Phase) -> float:
        return getattr(self, Phase(phase).value)

    def time_modifier(self, bucket: TimeOfDay) -> float:
        return getattr(self, TimeOfDay(bucket).value)


# category, event type, base, menstrual, follicular, ovulation, luteal,
# morning, afternoon, evening, stress coefficient
_ROWS: list[tuple] = [
    # ── Work ────────────────────────────────────────────────────────────────
    ("work", "Focus work (2-4h)", -0.30, -0.50, -0.10, 0.00, -0.40, -0.40, -0.20, -0.60, 0.20),
    ("work", "Meeting (30-60m)", -0.40, -0.70, -0.20, -0.10, -0.50, -0.60, -0.30, -0.50, 0.60),
    ("work", "Presentation", -0.60, -1.00, -0.30, -0.10, -0.70, -0.70, -0.50, -0.80, 0.80),
    ("work", "Email", -0.15, -0.30, -0.05, 0.00, -0.20, -0.20, -0.10, -0.30, 0.15),
    ("work", "Call/video call", -0.25, -0.50, -0.10, -0.05, -0.35, -0.40, -0.20, -0.40, 0.40),
    ("work", "Conflict with colleague", -0.80, -1.00, -0.60, -0.40, -0.90, -0.70, -0.70, -0.90, 1.00),
    ("work", "Deadline/rush", -0.70, -1.00, -0.50, -0.30, -0.80, -0.80, -0.70, -0.80, 0.90),
    # ── Family ──────────────────────────────────────────────────────────────
    ("family", "Family dinner", -0.15, -0.30, 0.10, 0.20, -0.20, 0.00, 0.00, -0.30, 0.10),
    ("family", "Helping child", -0.30, -0.50, -0.10, -0.05, -0.40, -0.20, -0.40, -0.30, 0.25),
    ("family", "Argument with partner", -0.70, -1.00, -0.50, -0.30, -0.80, -0.60, -0.70, -0.80, 0.95),
    ("family", "Talk with parents", -0.40, -0.60, -0.20, -0.10, -0.50, -0.40, -0.30, -0.50, 0.50),
    ("family", "Birthday/celebration", -0.20, -0.40, 0.20, 0.30, -0.25, -0.10, 0.00, -0.35, 0.15),
    # ── Household ───────────────────────────────────────────────────────────
    ("household", "Cleaning (30-60m)", -0.25, -0.50, -0.05, 0.10, -0.30, -0.20, -0.20, -0.40, 0.20),
    ("household", "Shopping (30-40m)", -0.20, -0.40, 0.00, 0.10, -0.25, -0.10, -0.20, -0.30, 0.15),
    ("household", "Laundry/cooking", -0.15, -0.30, -0.05, 0.00, -0.20, -0.10, -0.15, -0.20, 0.10),
    ("household", "Cooking (1-2h)", -0.20, -0.40, -0.05, 0.05, -0.25, -0.15, -0.20, -0.30, 0.15),
    ("household", "Kitchen/dishes", -0.10, -0.20, 0.00, 0.05, -0.15, -0.05, -0.10, -0.15, 0.08),
    ("household", "Laundry", -0.12, -0.25, 0.00, 0.05, -0.15, -0.10, -0.10, -0.15, 0.10),
    ("household", "Finances/paperwork", -0.35, -0.60, -0.15, -0.05, -0.45, -0.35, -0.30, -0.45, 0.70),
    ("household", "Repairs/plumber", -0.40, -0.70, -0.20, -0.10, -0.50, -0.40, -0.35, -0.50, 0.75),
    ("household", "Car/appliances", -0.30, -0.55, -0.10, 0.00, -0.40, -0.25, -0.25, -0.40, 0.60),
    # ── Social ──────────────────────────────────────────────────────────────
    ("social", "Party/event", -0.35, -0.60, 0.10, 0.30, -0.40, -0.20, -0.20, -0.50, 0.30),
    ("social", "Meeting friends", -0.20, -0.40, 0.10, 0.20, -0.25, -0.10, -0.15, -0.30, 0.15),
    ("social", "Networking event", -0.50, -0.80, -0.20, 0.10, -0.60, -0.50, -0.40, -0.65, 0.75),
    ("social", "One-on-one meeting", -0.25, -0.45, -0.05, 0.10, -0.35, -0.20, -0.15, -0.40, 0.35),
    ("social", "Consultation/advice", -0.30, -0.50, -0.10, 0.05, -0.40, -0.30, -0.25, -0.45, 0.50),
    ("social", "Compliment/praise", 0.15, 0.10, 0.20, 0.30, 0.10, 0.15, 0.20, 0.10, -0.30),
    # ── Sport ───────────────────────────────────────────────────────────────
    ("sport", "Workout (60m)", -0.20, -0.60, 0.20, 0.40, -0.30, -0.10, 0.10, -0.30, 0.15),
    ("sport", "Gentle yoga (30m)", 0.20, 0.40, 0.10, 0.00, 0.30, 0.30, 0.20, 0.10, -0.40),
    ("sport", "Intense yoga", -0.15, -0.40, 0.15, 0.35, -0.25, -0.05, 0.10, -0.25, 0.10),
    ("sport", "Cardio/HIIT", -0.40, -0.80, 0.30, 0.50, -0.50, -0.30, 0.10, -0.50, 0.25),
    ("sport", "Strength training", -0.25, -0.60, 0.15, 0.35, -0.35, -0.15, 0.05, -0.35, 0.20),
    ("sport", "Brisk walk", 0.20, 0.00, 0.40, 0.50, 0.15, 0.30, 0.25, 0.10, -0.25),
    ("sport", "Pilates", 0.15, 0.20, 0.10, 0.10, 0.20, 0.20, 0.15, 0.10, -0.35),
    ("sport", "Stretching", 0.25, 0.35, 0.20, 0.15, 0.30, 0.30, 0.25, 0.20, -0.50),
    ("sport", "Dancing/zumba", -0.10, -0.40, 0.25, 0.45, -0.20, 0.00, 0.15, -0.20, 0.05),
    # ── Recovery ────────────────────────────────────────────────────────────
    ("recovery", "Sleep (7-8h)", 0.80, 1.00, 0.60, 0.40, 0.90, 0.00, 0.30, 1.00, -1.00),
    ("recovery", "Walk (20-30m)", 0.40, 0.20, 0.60, 0.70, 0.30, 0.50, 0.40, 0.20, -0.35),
    ("recovery", "Meditation (20m)", 0.50, 0.70, 0.40, 0.30, 0.60, 0.60, 0.50, 0.40, -0.70),
    ("recovery", "Massage/spa", 0.60, 0.90, 0.30, 0.20, 0.70, 0.40, 0.70, 0.60, -0.80),
    ("recovery", "Hot bath", 0.55, 0.85, 0.35, 0.25, 0.65, 0.20, 0.40, 0.75, -0.75),
    ("recovery", "Reading/hobby", 0.35, 0.50, 0.25, 0.15, 0.45, 0.20, 0.35, 0.45, -0.50),
    ("recovery", "Movie/series", 0.30, 0.45, 0.20, 0.10, 0.40, 0.10, 0.25, 0.40, -0.45),
    ("recovery", "Creative work/drawing", 0.40, 0.55, 0.30, 0.20, 0.50, 0.35, 0.40, 0.45, -0.55),
    ("recovery", "Music/singing", 0.45, 0.65, 0.35, 0.25, 0.55, 0.40, 0.45, 0.50, -0.60),
    ("recovery", "Nature/forest", 0.50, 0.70, 0.40, 0.30, 0.60, 0.55, 0.50, 0.45, -0.65),
    ("recovery", "Hugs/connection", 0.35, 0.50, 0.25, 0.15, 0.45, 0.30, 0.35, 0.40, -0.55),
    ("recovery", "Sex", 0.25, 0.10, 0.40, 0.50, 0.20, 0.15, 0.30, 0.25, -0.70),
    ("recovery", "Intimacy", 0.30, 0.20, 0.35, 0.45, 0.25, 0.25, 0.30, 0.35, -0.65),
    # ── Health ──────────────────────────────────────────────────────────────
    ("health", "Doctor appointment", -0.45, -0.70, -0.25, -0.15, -0.55, -0.40, -0.50, -0.50, 0.85),
    ("health", "Lab tests", -0.40, -0.65, -0.20, -0.10, -0.50, -0.35, -0.45, -0.45, 0.80),
    ("health", "Dentist", -0.50, -0.80, -0.30, -0.20, -0.60, -0.50, -0.55, -0.55, 0.95),
    ("health", "Physiotherapy", -0.30, -0.50, -0.10, 0.00, -0.40, -0.25, -0.30, -0.35, 0.60),
    ("health", "Taking medication", -0.10, -0.20, 0.00, 0.05, -0.15, -0.10, -0.10, -0.10, 0.30),
    ("health", "Vitamins", 0.10, 0.15, 0.10, 0.05, 0.15, 0.10, 0.10, 0.10, -0.20),
    # ── Learning ────────────────────────────────────────────────────────────
    ("learning", "Study/course", -0.35, -0.55, -0.15, -0.05, -0.45, -0.35, -0.30, -0.45, 0.50),
    ("learning", "Webinar", -0.30, -0.50, -0.10, 0.00, -0.40, -0.30, -0.25, -0.40, 0.45),
    ("learning", "Business reading", -0.20, -0.40, 0.00, 0.10, -0.30, -0.20, -0.15, -0.30, 0.30),
    ("learning", "Podcast/audiobook", 0.15, 0.00, 0.25, 0.35, 0.10, 0.20, 0.20, 0.10, -0.25),
    # ── Emotions ────────────────────────────────────────────────────────────
    ("emotions", "Conflict/argument", -0.85, -1.00, -0.70, -0.50, -0.95, -0.80, -0.85, -0.95, 1.00),
    ("emotions", "Criticism/rejection", -0.70, -1.00, -0.50, -0.30, -0.80, -0.70, -0.70, -0.80, 0.95),
    ("emotions", "Success/achievement", 0.60, 0.40, 0.70, 0.80, 0.50, 0.60, 0.65, 0.55, -0.80),
    ("emotions", "Inspiration", 0.55, 0.35, 0.65, 0.75, 0.45, 0.55, 0.60, 0.50, -0.75),
    ("emotions", "Sadness/grief", -0.60, -0.90, -0.40, -0.20, -0.70, -0.60, -0.60, -0.70, 0.90),
    ("emotions", "Anxiety/panic", -0.75, -1.00, -0.55, -0.35, -0.85, -0.75, -0.75, -0.85, 1.00),
    ("emotions", "Gratitude", 0.50, 0.35, 0.60, 0.70, 0.40, 0.50, 0.55, 0.45, -0.70),
    # ── Nutrition ───────────────────────────────────────────────────────────
    ("nutrition", "Nutritious breakfast", 0.20, 0.30, 0.15, 0.10, 0.25, 0.25, 0.00, 0.00, -0.30),
    ("nutrition", "Healthy lunch", 0.25, 0.35, 0.20, 0.15, 0.30, 0.00, 0.30, 0.00, -0.35),
    ("nutrition", "Light dinner", 0.15, 0.25, 0.10, 0.05, 0.20, 0.00, 0.00, 0.20, -0.25),
    ("nutrition", "Sweets/candy", -0.05, -0.15, 0.10, 0.15, -0.10, -0.05, 0.05, -0.10, 0.15),
    ("nutrition", "Coffee/caffeine", -0.15, -0.30, 0.00, 0.10, -0.20, -0.20, -0.10, -0.25, 0.35),
    ("nutrition", "Alcohol", -0.25, -0.40, -0.10, 0.00, -0.30, -0.30, 0.00, -0.35, 0.50),
    ("nutrition", "Water (hydration)", 0.15, 0.25, 0.10, 0.05, 0.20, 0.15, 0.15, 0.15, -0.20),
    # ── Self-care ───────────────────────────────────────────────────────────
    ("self-care", "Cold shower", 0.30, 0.10, 0.45, 0.50, 0.20, 0.40, 0.30, 0.20, -0.40),
    ("self-care", "Hot shower", 0.25, 0.40, 0.15, 0.05, 0.35, 0.10, 0.20, 0.35, -0.35),
    ("self-care", "Makeup", 0.10, 0.00, 0.15, 0.20, 0.05, 0.15, 0.10, 0.00, -0.15),
    ("self-care", "Hair styling", 0.15, 0.05, 0.20, 0.25, 0.10, 0.20, 0.15, 0.05, -0.20),
    ("self-care", "Skin care", 0.20, 0.30, 0.15, 0.10, 0.25, 0.15, 0.10, 0.25, -0.25),
]

REFERENCE_TABLE: tuple[CoefficientTableRow, ...] = tuple(
    CoefficientTableRow(*row) for row in _ROWS
)

# Extra phrasings that calendar titles commonly use.  Canonical labels are
# always matched too; keep aliases lowercase.
EVENT_ALIASES: dict[str, list[str]] = {
    "Focus work (2-4h)": ["focus work", "deep work", "focus time", "heads-down"],
    "Meeting (30-60m)": ["meeting", "team meeting", "sync", "standup", "stand-up", "status meeting"],
    "Presentation": ["presentation", "demo", "pitch", "talk"],
    "Email": ["email", "emails", "inbox", "inbox zero"],
    "Call/video call": ["call", "video call", "zoom", "teams call", "phone call"],
    "Deadline/rush": ["deadline", "due date", "crunch"],
    "Family dinner": ["family dinner", "dinner with family"],
    "Helping child": ["homework with kids", "school pickup", "kids"],
    "Talk with parents": ["call parents", "call mom", "call dad", "visit parents"],
    "Birthday/celebration": ["birthday", "celebration", "anniversary"],
    "Cleaning (30-60m)": ["cleaning", "clean house", "tidy up"],
    "Shopping (30-40m)": ["shopping", "groceries", "grocery run"],
    "Finances/paperwork": ["taxes", "paperwork", "bills", "budget review"],
    "Repairs/plumber": ["plumber", "repair", "electrician", "handyman"],
    "Car/appliances": ["car service", "mechanic", "oil change"],
    "Party/event": ["party", "event", "concert"],
    "Meeting friends": ["drinks with friends", "brunch", "coffee with friends", "friends"],
    "Networking event": ["networking", "meetup", "conference"],
    "One-on-one meeting": ["1:1", "1-on-1", "one on one", "one-on-one"],
    "Consultation/advice": ["consultation", "mentoring", "coaching session"],
    "Workout (60m)": ["workout", "gym", "training"],
    "Gentle yoga (30m)": ["yoga", "gentle yoga", "yin yoga"],
    "Intense yoga": ["power yoga", "vinyasa", "hot yoga"],
    "Cardio/HIIT": ["hiit", "cardio", "spin class", "run", "running"],
    "Strength training": ["weights", "lifting", "strength"],
    "Brisk walk": ["power walk"],
    "Dancing/zumba": ["dance class", "zumba", "dancing"],
    "Walk (20-30m)": ["walk", "stroll", "walk the dog"],
    "Meditation (20m)": ["meditation", "meditate", "mindfulness"],
    "Massage/spa": ["massage", "spa"],
    "Reading/hobby": ["reading", "hobby", "book club"],
    "Movie/series": ["movie", "cinema", "netflix", "tv"],
    "Doctor appointment": ["doctor", "gp appointment", "checkup", "gynecologist", "therapist"],
    "Lab tests": ["blood test", "lab work", "labs"],
    "Dentist": ["dentist", "dental cleaning", "orthodontist"],
    "Physiotherapy": ["physio", "physical therapy"],
    "Study/course": ["class", "lecture", "course", "study session", "exam"],
    "Webinar": ["webinar", "online workshop"],
    "Nutritious breakfast": ["breakfast"],
    "Healthy lunch": ["lunch"],
    "Light dinner": ["dinner"],
    "Coffee/caffeine": ["coffee"],
    "Alcohol": ["wine", "happy hour", "bar"],
}


def all_categories() -> list[str]:
    """Return category names in table order, without duplicates."""
    seen: dict[str, None] = {}
    for row in REFERENCE_TABLE:
        seen.setdefault(row.category, None)
    return list(seen)


def rows_for_category(category: str) -> list[CoefficientTableRow]:
    key = category.strip().lower()
    return [row for row in REFERENCE_TABLE if row.category.lower() == key]


def search_rows(term: str) -> list[CoefficientTableRow]:
    """Substring search over canonical labels (case-insensitive)."""
    key = term.strip().lower()
    if not key:
        return []
    return [row for row in REFERENCE_TABLE if key in row.event_type.lower()]


def find_row(event_type: str) -> CoefficientTableRow | None:
    """Exact, case-insensitive lookup by canonical label."""
    key = event_type.strip().lower()
    for row in REFERENCE_TABLE:
        if row.event_type.lower() == key:
            return row
    return None
