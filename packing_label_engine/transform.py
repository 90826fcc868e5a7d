"""
Coordinate models that map layout units onto template pages.
"""

# Standard Library
import dataclasses
from typing import Callable

# local repo modules
import packing_label_engine as ple
import packing_label_engine.config


LayoutEntry = ple.config.LayoutEntry

DESIGN_GRID_WIDTH = ple.config.DESIGN_GRID_WIDTH
DESIGN_GRID_HEIGHT = ple.config.DESIGN_GRID_HEIGHT
PRIMARY_LABEL_WIDTH_MM = ple.config.PRIMARY_LABEL_WIDTH_MM
PRIMARY_LABEL_HEIGHT_MM = ple.config.PRIMARY_LABEL_HEIGHT_MM
DETAIL_LABEL_WIDTH_MM = ple.config.DETAIL_LABEL_WIDTH_MM
DETAIL_LABEL_HEIGHT_MM = ple.config.DETAIL_LABEL_HEIGHT_MM
DEFAULT_TEXT_MIN_SIZE = ple.config.DEFAULT_TEXT_MIN_SIZE


@dataclasses.dataclass(frozen=True)
class DesignGrid:
	"""Fixed reference grid, origin top-left, y growing downward."""

	ref_width: float = DESIGN_GRID_WIDTH
	ref_height: float = DESIGN_GRID_HEIGHT

	def x_to_page(self, grid_x: float, page_width: float) -> float:
		return grid_x * page_width / self.ref_width

	def to_page(
		self,
		grid_x: float,
		grid_y: float,
		page_width: float,
		page_height: float,
	) -> tuple[float, float]:
		page_y = page_height - grid_y * page_height / self.ref_height
		return self.x_to_page(grid_x, page_width), page_y

	def scale_font(self, font_size: float, page_height: float) -> float:
		return font_size * page_height / self.ref_height


@dataclasses.dataclass(frozen=True)
class MillimetreFrame:
	"""Physical label frame, origin bottom-left, y growing upward."""

	width_mm: float
	height_mm: float

	def x_to_page(self, mm_x: float, page_width: float) -> float:
		return mm_x / self.width_mm * page_width

	def to_page(
		self,
		mm_x: float,
		mm_y: float,
		page_width: float,
		page_height: float,
	) -> tuple[float, float]:
		return self.x_to_page(mm_x, page_width), mm_y / self.height_mm * page_height


@dataclasses.dataclass
class PlacedText:
	text: str
	x: float
	y: float
	font_size: float


PRIMARY_GRID = DesignGrid()
PRIMARY_FRAME = MillimetreFrame(PRIMARY_LABEL_WIDTH_MM, PRIMARY_LABEL_HEIGHT_MM)
DETAIL_FRAME = MillimetreFrame(DETAIL_LABEL_WIDTH_MM, DETAIL_LABEL_HEIGHT_MM)


#============================================
def resolve_aligned_x(base_x: float, align: str, text_width: float) -> float:
	"""
	Shift an anchor x so the text sits on it with the given alignment.

	Args:
		base_x: Anchor x in page points.
		align: left, center or right.
		text_width: Measured text width in points.

	Returns:
		Left edge of the text run.
	"""
	normalized = align.strip().lower()
	if normalized == "center":
		return base_x - text_width / 2.0
	if normalized == "right":
		return base_x - text_width
	return base_x


#============================================
def fit_font_size(
	text_width: float,
	font_size: float,
	available: float,
	min_font_size: float = DEFAULT_TEXT_MIN_SIZE,
) -> float:
	"""
	Shrink a font size until the text fits the available width.

	Args:
		text_width: Width of the text at font_size.
		font_size: Requested font size.
		available: Available width in points.
		min_font_size: Floor for the returned size.

	Returns:
		Font size to draw with.
	"""
	if text_width <= available or text_width <= 0:
		return font_size
	scaled = font_size * available / text_width
	return max(min_font_size, scaled)


#============================================
def place_text(
	entry: LayoutEntry,
	text: str,
	page_width: float,
	page_height: float,
	measure: Callable[[str, float], float],
	grid: DesignGrid = PRIMARY_GRID,
	frame: MillimetreFrame = PRIMARY_FRAME,
) -> PlacedText:
	"""
	Resolve a layout entry into a page position and font size.

	Grid entries scale their font with the page height; millimetre
	entries keep an absolute point size.

	Args:
		entry: Layout entry to place.
		text: Text that will be drawn.
		page_width: Page width in points.
		page_height: Page height in points.
		measure: Callable returning text width for (text, font_size).
		grid: Design grid for grid entries.
		frame: Millimetre frame for mm entries.

	Returns:
		PlacedText with the final baseline origin.
	"""
	min_x = None
	if entry.units == "mm":
		base_x, base_y = frame.to_page(entry.x, entry.y, page_width, page_height)
		font_size = entry.font_size
		if entry.min_x is not None:
			min_x = frame.x_to_page(entry.min_x, page_width)
	else:
		base_x, base_y = grid.to_page(entry.x, entry.y, page_width, page_height)
		font_size = grid.scale_font(entry.font_size, page_height)
		if entry.min_x is not None:
			min_x = grid.x_to_page(entry.min_x, page_width)
	text_width = measure(text, font_size)
	x = resolve_aligned_x(base_x, entry.align, text_width)
	if min_x is not None:
		x = max(min_x, x)
	return PlacedText(text=text, x=x, y=base_y + entry.nudge_y, font_size=font_size)
