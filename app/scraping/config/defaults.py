"""
Built-in extraction profiles for casinoscores-style game statistics pages.

The three table sections every game page carries are the default for targets
configured only by URL. Game-specific panels are bundled into named presets
that JSON entries select by name.
"""

from __future__ import annotations

from app.scraping.config.models import ExtractionProfile, FallbackProfile, FieldSpec, TableSection

TOP_MULTIPLIERS_LIMIT = 5

DEFAULT_READY_SELECTOR = 'tbody[data-slot="table-body"]'

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

DEFAULT_EXTRA_HEADERS: dict[str, str] = {
    "Accept-Language": "en-US,en;q=0.9",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
}

ROUND_RESULTS = TableSection(
    name="round_results",
    row_selector='tbody[data-slot="table-body"] > tr[data-slot="table-row"]',
    cell_selector='td[data-slot="table-cell"]',
    fields=(
        FieldSpec(name="finished", position=0),
        FieldSpec(name="slot_result", position=2),
        FieldSpec(name="slot_image_url", position=1, image=True),
        FieldSpec(name="spin_image_url", position=4, image=True),
        FieldSpec(name="payout", position=3),
        FieldSpec(name="multiplier", position=4),
    ),
)

TOP_MULTIPLIERS = TableSection(
    name="top_multipliers",
    row_selector='[data-testid="latest-top-multipliers"] table tbody tr',
    fields=(
        FieldSpec(name="finished", position=0),
        FieldSpec(name="outcome_image_url", position=1, image=True),
        FieldSpec(name="multiplier", position=2),
    ),
    limit=TOP_MULTIPLIERS_LIMIT,
)

INDIVIDUAL_WINS = TableSection(
    name="individual_wins",
    row_selector='[data-testid="best-individual-wins"] table tbody tr',
    fields=(
        FieldSpec(name="finished", position=0),
        FieldSpec(name="outcome_image_url", position=1, image=True),
        FieldSpec(name="player", position=2),
        FieldSpec(name="won_amount", position=3),
        FieldSpec(name="multiplier", position=4),
    ),
    row_filter="individual_win",
)

BONUS_CARDS = TableSection(
    name="bonus_cards",
    row_selector="#BonusCardDesktop > div",
    cell_selector=None,
    fields=(
        FieldSpec(name="label", selector="#BonusLabel"),
        FieldSpec(name="logo", selector="#BonusLogo"),
        FieldSpec(name="description", selector="#BonusDescription"),
        FieldSpec(name="cta", selector="#BonusCTA"),
        FieldSpec(name="image_url", image=True),
    ),
)

# Crazy Time bonus-game panels.

TOP_SLOT_MATCHED = TableSection(
    name="top_slot_matched",
    row_selector='div[data-testid="matched-container"]',
    cell_selector=None,
    fields=(
        FieldSpec(name="top_slot_name", selector='div[class*="tw:grid-cols-12"]'),
        FieldSpec(
            name="match",
            selector='div#card[data-slot="card"]',
            pattern=r"(?<!No )Match\s*(\d+(?:\.\d+)?%?)",
        ),
        FieldSpec(
            name="no_match",
            selector='div#card[data-slot="card"]',
            pattern=r"No Match\s*(\d+(?:\.\d+)?%?)",
        ),
    ),
)

CRAZY_FLAPPER = TableSection(
    name="crazy_flapper",
    row_selector='div[data-testid="crazy-bonus-flapper-stats-container"]',
    cell_selector='span[data-slot="badge"]',
    fields=(
        FieldSpec(name="avg_multiplier_flapper_1", position=2),
        FieldSpec(name="avg_multiplier_flapper_2", position=1),
        FieldSpec(name="avg_multiplier_flapper_3", position=0),
    ),
)

_FLIP_VALUE = 'p[class*="tw:text-center"][class*="tw:font-bold"][class*="tw:mt-2"]'
_FLIP_MULTIPLIER = r"^(\d+(?:\.\d+)?[xX])"
_FLIP_PERCENT = r"(\d+(?:\.\d+)?%)$"

CRAZY_FLIP = TableSection(
    name="crazy_flip",
    row_selector='div[data-testid="coin-flip-stats-container"]',
    cell_selector=_FLIP_VALUE,
    fields=(
        FieldSpec(name="blue_flips_multiplier", position=0, pattern=_FLIP_MULTIPLIER),
        FieldSpec(name="blue_flips_percent", position=0, pattern=_FLIP_PERCENT),
        FieldSpec(name="red_flips_multiplier", position=1, pattern=_FLIP_MULTIPLIER),
        FieldSpec(name="red_flips_percent", position=1, pattern=_FLIP_PERCENT),
    ),
)

CASH_HUNT_SYMBOLS = TableSection(
    name="cash_hunt_symbols",
    row_selector='div[class*="tw:grid-cols-5"] div[class*="tw:flex-col"][class*="tw:items-center"]',
    cell_selector=None,
    fields=(
        FieldSpec(name="symbol_image_url", image=True),
        FieldSpec(name="multiplier", selector='p[class*="tw:font-bold"]'),
        FieldSpec(name="suffix", selector='p[class*="tw:text-xs"]'),
    ),
)

# Monopoly board panels.

_FRACTION = r"\d+/\d+"
_PERCENT = r"\d+\.\d+%"

BOARD_MOVES = TableSection(
    name="board_moves",
    row_selector='div[data-testid="board-statistics"]',
    cell_selector=None,
    fields=(
        FieldSpec(name="bonus_game_stats", pattern=rf"({_FRACTION})"),
        FieldSpec(name="bonus_game_percentage", pattern=rf"({_PERCENT})"),
        FieldSpec(name="doubles_rolled", pattern=rf"{_FRACTION}.*?({_FRACTION})"),
        FieldSpec(name="doubles_rolled_percentage", pattern=rf"{_PERCENT}.*?({_PERCENT})"),
    ),
)

LANDING_SQUARES = TableSection(
    name="landing_squares",
    row_selector=(
        'div[data-testid="landing-square-stats"] '
        'div[class*="tw:w-full"][class*="tw:overflow-hidden"]'
    ),
    cell_selector=None,
    fields=(
        FieldSpec(name="square_name", selector='div[class*="tw:left-2"]'),
        FieldSpec(name="percentage", selector='div[class*="tw:bg-"]'),
    ),
    row_filter="landing_square",
)

_PROGRESS_BAR_ROW = (
    'div[class*="tw:w-full"][class*="tw:overflow-hidden"][class*="tw:rounded-sm"]'
)
_PROGRESS_BAR_TITLE = 'div[data-testid="progress-bar-title"]'
_PROGRESS_BAR_VALUE = 'div[data-state="loading"] span[class*="tw:inset-0"]'

CHANCE_STATISTICS = TableSection(
    name="chance_statistics",
    row_selector=_PROGRESS_BAR_ROW,
    cell_selector=None,
    fields=(
        FieldSpec(name="multiplier_type", selector=_PROGRESS_BAR_TITLE),
        FieldSpec(name="percentage", selector=_PROGRESS_BAR_VALUE),
    ),
    row_filter="chance_multiplier",
)

BOARD_MOVE_BARS = TableSection(
    name="board_move_bars",
    row_selector=_PROGRESS_BAR_ROW,
    cell_selector=None,
    fields=(
        FieldSpec(name="stat_type", selector=_PROGRESS_BAR_TITLE),
        FieldSpec(name="percentage", selector=_PROGRESS_BAR_VALUE),
    ),
    row_filter="board_move_bar",
)

# Roulette single-number hot/cold panel.

TEMPERATURE = TableSection(
    name="temperature",
    row_selector='div[data-testid="single-number-stats"]',
    cell_selector="span",
    fields=(
        FieldSpec(name="number", position=0),
        FieldSpec(name="percentage", position=-1),
    ),
)

DEFAULT_SECTIONS: tuple[TableSection, ...] = (ROUND_RESULTS, TOP_MULTIPLIERS, INDIVIDUAL_WINS)

# Named bundles a targets.json entry can select with "sections": "<preset>".
SECTION_PRESETS: dict[str, tuple[TableSection, ...]] = {
    "default": DEFAULT_SECTIONS,
    "crazy_time": DEFAULT_SECTIONS
    + (BONUS_CARDS, TOP_SLOT_MATCHED, CRAZY_FLAPPER, CRAZY_FLIP, CASH_HUNT_SYMBOLS),
    "monopoly": DEFAULT_SECTIONS
    + (BONUS_CARDS, BOARD_MOVES, LANDING_SQUARES, CHANCE_STATISTICS, BOARD_MOVE_BARS),
    "roulette": DEFAULT_SECTIONS + (TEMPERATURE,),
}

DEFAULT_FEATURE_KEYWORDS: tuple[str, ...] = (
    "live dealer",
    "live stream",
    "real time",
    "multiplier",
    "bonus rounds",
    "wheel spin",
    "cash hunt",
    "coin flip",
    "pachinko",
    "statistics",
    "big wins",
)

DEFAULT_FEATURES: tuple[str, ...] = ("live", "game show", "wheel", "multipliers")


def default_profile(
    *,
    keywords: tuple[str, ...] = (),
    description: str = "",
    default_url: str | None = None,
    sections: tuple[TableSection, ...] = DEFAULT_SECTIONS,
) -> ExtractionProfile:
    return ExtractionProfile(
        sections=sections,
        fallback=FallbackProfile(
            keywords=keywords,
            feature_keywords=DEFAULT_FEATURE_KEYWORDS,
            default_description=description,
            default_features=DEFAULT_FEATURES,
            default_url=default_url,
        ),
    )
