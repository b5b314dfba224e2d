"""Constants and configuration for the folio page-view engine."""

class EngineConstants:
    """Central configuration constants for pagination and page views."""

    # Page geometry (pixels at 96 DPI)
    DEFAULT_MARGIN = 95  # 2.5 cm
    HEADER_HEIGHT_DEFAULT = 50
    FOOTER_HEIGHT_DEFAULT = 40
    HEADER_FOOTER_MIN_HEIGHT = 20
    HEADER_FOOTER_MAX_HEIGHT = 150

    # Text layout (character cells)
    LINE_HEIGHT = 18  # Pixels per rendered text line
    CHAR_WIDTH = 9  # Pixels per character cell
    PARAGRAPH_SPACING = 0  # Extra pixels below each paragraph
    HEADING_SPACING = 18  # Extra pixels above a heading

    # Page grid
    GRID_PADDING = 32  # Padding around the grid of page frames
    PAGE_GAP = 40  # Gap between rows and columns of page frames
    CONTAINER_PADDING = 64  # Horizontal padding of the scroll container
    TWO_PAGES_BREAKPOINT = 1400  # Container width for 2 pages per row in auto mode
    THREE_PAGES_BREAKPOINT = 2000  # Container width for 3 pages per row in auto mode

    # Zoom
    MIN_ZOOM = 0.5
    MAX_ZOOM = 2.0
    ZOOM_STEP = 0.1

    # Timing (milliseconds)
    RECALCULATE_DEBOUNCE_MS = 100  # Delay after the last edit before repaginating
    SCROLL_IDLE_MS = 200  # Scroll must be quiet this long before activating a page
    SCROLL_ANIMATION_MS = 300  # Duration of an animated scroll-to-page
    SCROLL_SETTLE_MS = 100  # Auto-scroll guard stays up this long after arrival
    FRAME_INTERVAL_MS = 16  # Nominal animation frame interval

    # Virtualization
    DEFAULT_OVERSCAN = 1  # Pages kept mounted beside intersecting pages
    PRELOAD_MARGIN = 200  # Pixels beyond the viewport that count as intersecting

    # Terminal rendering
    PAGE_BREAK_RULE = "─"
    PAGE_BREAK_LABEL = " Page {} "
    PLACEHOLDER_FILL = "·"

    # Settings storage
    APP_NAME = "folio"
    APP_AUTHOR = "folio"
    SETTINGS_FILENAME = "page_settings.json"
