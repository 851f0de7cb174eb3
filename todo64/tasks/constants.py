"""Fixed limits and palette."""

# Local notification hosts keep at most 64 pending requests per app, so
# task creation is capped at the same number.
MAX_ITEM_COUNT = 64

TITLE_MAX_LENGTH = 40
CONTENT_MAX_LENGTH = 200

PASTEL_COLORS: tuple[str, ...] = (
    "#FFB3BA",  # red
    "#FFDFBA",  # orange
    "#FFFFBA",  # yellow
    "#BAFFC9",  # green
    "#BAE1FF",  # blue
    "#E6E6FA",  # lavender
    "#FFC0CB",  # pink
    "#FFD1DC",  # light pink
    "#E0BBE4",  # purple
    "#957DAD",  # dusty purple
)
DEFAULT_COLOR = "#BAE1FF"
