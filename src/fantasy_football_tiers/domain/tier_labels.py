TIER_COLORS: tuple[str, ...] = (
    "#FF073A",  # tier 1: red
    "#FFB800",  # tier 2: amber
    "#39FF14",  # tier 3: green
    "#00F5FF",  # tier 4: electric blue
    "#BF00FF",  # tier 5: purple
    "#00FFBF",  # tier 6: teal
    "#4B5563",  # tier 7+: slate
    "#374151",
    "#1F2937",
    "#111827",
)

TIER_LABELS: tuple[str, ...] = (
    "Elite",
    "Excellent",
    "Very Good",
    "Good",
    "Solid",
    "Decent",
    "Deep",
    "Late Round",
    "Waiver Wire",
    "Bench",
)


def tier_color(tier_index: int) -> str:
    if tier_index < 1:
        return TIER_COLORS[0]
    return TIER_COLORS[min(tier_index, len(TIER_COLORS)) - 1]


def tier_label(tier_index: int) -> str:
    if 1 <= tier_index <= len(TIER_LABELS):
        return TIER_LABELS[tier_index - 1]
    return f"Tier {tier_index}"
