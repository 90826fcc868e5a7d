"""
Shared configuration, constants and data model.
"""

# Standard Library
import dataclasses
import os
import pathlib


# design grid used by template layouts, in grid units
DESIGN_GRID_WIDTH = 1262.0
DESIGN_GRID_HEIGHT = 768.0

# physical label sizes for millimetre keyed layouts
PRIMARY_LABEL_WIDTH_MM = 67.0
PRIMARY_LABEL_HEIGHT_MM = 41.0
DETAIL_LABEL_WIDTH_MM = 100.0
DETAIL_LABEL_HEIGHT_MM = 50.0

DEFAULT_FONT_REGULAR = "Helvetica"
REGISTERED_FONT_PREFIX = "LabelFont"
DEFAULT_FONT_SIZE = 55.0
DEFAULT_TEXT_MIN_SIZE = 5.0
LABEL_FONT_ENV_KEY = "LABEL_FONT_PATH"
LABEL_TEMPLATE_ENV_KEY = "LABEL_TEMPLATE_PATH"
LABEL_ASSET_ROOT_ENV_KEY = "LABEL_ASSET_ROOT"
DEFAULT_ASSET_ROOT = "public"
DEFAULT_FONT_CANDIDATES = (
	"fonts/Arial.ttf",
	"Arial.ttf",
	"fonts/arial.ttf",
	"/Library/Fonts/Arial.ttf",
	"/System/Library/Fonts/Supplemental/Arial.ttf",
	"C:\\Windows\\Fonts\\arial.ttf",
	"/usr/share/fonts/truetype/msttcorefonts/Arial.ttf",
	"/usr/share/fonts/truetype/msttcorefonts/arial.ttf",
)

DEFAULT_TEMPLATE_NAMES = ("Etiqueta.pdf", "Etiqueta.png")
TEMPLATE_SUFFIX_PATTERNS = (
	"-{tag}.pdf",
	"_{tag}.pdf",
	"-{tag}-template.pdf",
	"-{tag}_etiqueta.pdf",
	"{tag}.pdf",
)
PDF_TEMPLATE_EXTENSIONS = {".pdf"}

LOT_PREFIX_LENGTH = 2
LOT_NUMBER_LENGTH = 5
LEGACY_LOT_NUMBER_LENGTH = 4
TRACE_PREFIX = "E"
TRACE_LENGTH = 5
R_CODE_DELIVERY_DAYS = 4
R_CODE_SATURDAY_DELIVERY_DAYS = 5

DEFAULT_WEIGHT = "40gr"
DEFAULT_CATEGORY = "I"
PRODUCT_PLACEHOLDER = "PRODUCTO SIN NOMBRE"
VARIETY_PLACEHOLDER = "SIN VARIEDAD"
DATE_PLACEHOLDER = "Sin fecha"
LABEL_DATE_PLACEHOLDER = "SIN FECHA"
CODE_PLACEHOLDER = "SIN CODIGO"
EMPTY_BOX_VALUE = "-"

FILE_NAME_MARKER = "pedido-manual-"
FILE_NAME_TERMINAL = "-etiqueta.pdf"
PDF_MIME_TYPE = "application/pdf"

COMPANY_NAME = "Montaña Roja Herbs Sat 536/05 OPFH 1168"
COMPANY_ADDRESS = "C/La Constitución 53, Arico Viejo"
COC_NUMBER = "4063061581198"
ORIGIN_LINE = f"Origen: España (Canarias) · CoC: {COC_NUMBER}"
SMALL_PRODUCER_LINE = "Producido en España/Islas Canarias por"
SMALL_PRODUCER_NAME = "MONTAÑA ROJA HERBS OPFH 1186"
SMALL_ADDRESS = "C/Castillo 68, piso 6, Santa Cruz de Tenerife"
DETAIL_ORIGIN = "ESPAÑA / CANARIAS"
DETAIL_AGENCY_CODE = "MRH"

COMPACT_BOLD_OFFSETS = ((0.0, 0.0), (0.4, 0.0), (0.0, 0.4))
COMPACT_TITLE_EXTRA = 4.0
UNDERLINE_THICKNESS = 2.0
DETAIL_PADDING = 20.0
DETAIL_TOP_ROW_HEIGHT = 64.0
DETAIL_ROW_HEIGHT = 46.0
DETAIL_LABEL_SIZE = 10.0
DETAIL_BORDER_WIDTH = 1.0
BARCODE_TEXT_MIN_SIZE = 4.0
BARCODE_TEXT_MAX_SIZE = 10.0


@dataclasses.dataclass
class WhiteLabelConfig:
	width: float
	height: float
	margin: float
	line_spacing: float
	title_size: float
	body_size: float
	small_size: float


WHITE_LABEL_CONFIGS = {
	"blanca-grande": WhiteLabelConfig(
		width=720.0,
		height=360.0,
		margin=40.0,
		line_spacing=32.0,
		title_size=30.0,
		body_size=20.0,
		small_size=17.0,
	),
	"blanca-pequena": WhiteLabelConfig(
		width=480.0,
		height=260.0,
		margin=28.0,
		line_spacing=24.0,
		title_size=22.0,
		body_size=15.0,
		small_size=13.0,
	),
}

CENTERED_10X5_CONFIG = WhiteLabelConfig(
	width=720.0,
	height=360.0,
	margin=36.0,
	line_spacing=28.0,
	title_size=38.0,
	body_size=26.0,
	small_size=20.0,
)


@dataclasses.dataclass
class LabelFields:
	packing_date: str | None = None
	lot: str | None = None
	label_code: str | None = None
	coc_code: str | None = None
	r_code: str | None = None
	weight: str | None = None
	product_name: str | None = None
	variety: str | None = None
	category: str | None = None
	box_weight: str | None = None
	buyer: str | None = None


@dataclasses.dataclass
class TemplateDescriptor:
	data: bytes
	kind: str
	width: float
	height: float
	path: str = ""

	def __post_init__(self) -> None:
		if self.width <= 0 or self.height <= 0:
			raise ValueError(f"Template page size must be positive: {self.width}x{self.height}")


@dataclasses.dataclass
class LayoutEntry:
	field_key: str
	x: float
	y: float
	font_size: float = DEFAULT_FONT_SIZE
	align: str = "left"
	units: str = "grid"
	min_x: float | None = None
	nudge_y: float = 0.0


@dataclasses.dataclass
class OverrideRule:
	buyer: str
	field_key: str
	product_key: str | None = None
	layout_set: str = "primary"
	dx: float = 0.0
	dy: float = 0.0
	suppress: bool = False
	replacement: LayoutEntry | None = None


@dataclasses.dataclass
class BarcodeDraw:
	x: float
	y: float
	width: float
	height: float


@dataclasses.dataclass
class DocumentVariant:
	name: str
	layout_set: str
	template_role: str
	variant_suffix: str | None = None


@dataclasses.dataclass
class TextLine:
	text: str
	size: float | None = None
	spacing: float | None = None
	align: str | None = None


@dataclasses.dataclass
class RenderResult:
	data: bytes
	file_name: str
	mime_type: str = PDF_MIME_TYPE


@dataclasses.dataclass
class EngineConfig:
	asset_root: pathlib.Path
	font_candidates: tuple[str, ...] = DEFAULT_FONT_CANDIDATES
	fallback_font_name: str = DEFAULT_FONT_REGULAR
	template_override: str | None = None


#============================================
def blank_template(width: float, height: float) -> TemplateDescriptor:
	"""
	Build the synthetic descriptor of an empty page.

	Args:
		width: Page width in points.
		height: Page height in points.

	Returns:
		TemplateDescriptor of kind "blank".
	"""
	return TemplateDescriptor(data=b"", kind="blank", width=width, height=height)


#============================================
def load_engine_config(environ: dict[str, str] | None = None) -> EngineConfig:
	"""
	Build an engine config from environment variables.

	Args:
		environ: Mapping to read from, defaults to os.environ.

	Returns:
		EngineConfig.
	"""
	if environ is None:
		environ = dict(os.environ)
	asset_root = pathlib.Path(environ.get(LABEL_ASSET_ROOT_ENV_KEY) or DEFAULT_ASSET_ROOT)
	font_candidates = DEFAULT_FONT_CANDIDATES
	explicit_font = (environ.get(LABEL_FONT_ENV_KEY) or "").strip()
	if explicit_font:
		font_candidates = (explicit_font,) + DEFAULT_FONT_CANDIDATES
	template_override = (environ.get(LABEL_TEMPLATE_ENV_KEY) or "").strip() or None
	return EngineConfig(
		asset_root=asset_root,
		font_candidates=font_candidates,
		template_override=template_override,
	)
