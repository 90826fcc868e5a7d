"""
Document assembly: turns one request into its ordered label documents.
"""

# Standard Library
import dataclasses
import enum
import logging
import random

# PIP3 modules
import pypdf.errors

# local repo modules
import packing_label_engine as ple
import packing_label_engine.assets
import packing_label_engine.barcode
import packing_label_engine.buyers
import packing_label_engine.canvas
import packing_label_engine.config
import packing_label_engine.filenames
import packing_label_engine.normalize
import packing_label_engine.registry
import packing_label_engine.transform


LabelFields = ple.config.LabelFields
EngineConfig = ple.config.EngineConfig
TemplateDescriptor = ple.config.TemplateDescriptor
DocumentVariant = ple.config.DocumentVariant
RenderResult = ple.config.RenderResult
BarcodeDraw = ple.config.BarcodeDraw
LayoutEntry = ple.config.LayoutEntry
WhiteLabelConfig = ple.config.WhiteLabelConfig
TextLine = ple.config.TextLine
NormalizedFields = ple.normalize.NormalizedFields
LayoutRegistry = ple.registry.LayoutRegistry
Buyer = ple.registry.Buyer
AssetCache = ple.assets.AssetCache
AssetStore = ple.assets.AssetStore
LabelFont = ple.assets.LabelFont
PageCanvas = ple.canvas.PageCanvas

LAYOUT_COMPACT = ple.registry.LAYOUT_COMPACT
LAYOUT_LINES = ple.registry.LAYOUT_LINES
ROLE_PRIMARY = ple.registry.ROLE_PRIMARY
ROLE_DETAIL = ple.registry.ROLE_DETAIL

CENTERED_10X5_CONFIG = ple.config.CENTERED_10X5_CONFIG
COMPACT_BOLD_OFFSETS = ple.config.COMPACT_BOLD_OFFSETS
COMPACT_TITLE_EXTRA = ple.config.COMPACT_TITLE_EXTRA
UNDERLINE_THICKNESS = ple.config.UNDERLINE_THICKNESS
DETAIL_PADDING = ple.config.DETAIL_PADDING
DETAIL_TOP_ROW_HEIGHT = ple.config.DETAIL_TOP_ROW_HEIGHT
DETAIL_ROW_HEIGHT = ple.config.DETAIL_ROW_HEIGHT
DETAIL_LABEL_SIZE = ple.config.DETAIL_LABEL_SIZE
DETAIL_BORDER_WIDTH = ple.config.DETAIL_BORDER_WIDTH
DETAIL_ORIGIN = ple.config.DETAIL_ORIGIN
DETAIL_AGENCY_CODE = ple.config.DETAIL_AGENCY_CODE
EMPTY_BOX_VALUE = ple.config.EMPTY_BOX_VALUE
BARCODE_TEXT_MIN_SIZE = ple.config.BARCODE_TEXT_MIN_SIZE
BARCODE_TEXT_MAX_SIZE = ple.config.BARCODE_TEXT_MAX_SIZE
DEFAULT_TEXT_MIN_SIZE = ple.config.DEFAULT_TEXT_MIN_SIZE

# errors a broken template can raise while its page is drawn or merged
TEMPLATE_RENDER_ERRORS = (pypdf.errors.PyPdfError, OSError, ValueError)

logger = logging.getLogger(__name__)


class AssemblyState(enum.Enum):
	RESOLVING_TEMPLATE = "resolving_template"
	NORMALIZING_FIELDS = "normalizing_fields"
	RESOLVING_LAYOUT = "resolving_layout"
	DRAWING = "drawing"
	DONE = "done"


@dataclasses.dataclass
class DetailBox:
	x: float
	top: float
	width: float
	height: float
	label: str
	value: str
	value_size: float


@dataclasses.dataclass
class AssemblyRun:
	"""Per-request state; never shared between requests."""

	registry: LayoutRegistry
	fields: LabelFields
	file_name: str
	font: LabelFont | None = None
	templates: dict[str, TemplateDescriptor | None] = dataclasses.field(default_factory=dict)
	normalized: NormalizedFields | None = None
	state: AssemblyState | None = None
	history: list[AssemblyState] = dataclasses.field(default_factory=list)
	results: list[RenderResult] = dataclasses.field(default_factory=list)

	def advance(self, state: AssemblyState) -> None:
		self.state = state
		self.history.append(state)
		logger.debug("%s: %s", self.file_name, state.value)


class LabelAssembler:
	"""
	Renders label requests into PDF documents.

	An assembler holds only immutable configuration, the shared asset
	cache and the injected random source, so one instance can serve
	concurrent requests.
	"""

	def __init__(
		self,
		config: EngineConfig,
		cache: AssetCache | None = None,
		rng: random.Random | None = None,
		registries: dict[Buyer, LayoutRegistry] | None = None,
	) -> None:
		self.config = config
		self.cache = cache if cache is not None else AssetCache()
		self.rng = rng if rng is not None else random.Random()
		self.registries = registries if registries is not None else ple.buyers.build_registries()
		self.store = AssetStore(config.asset_root)

	def registry_for(self, buyer_tag: str | Buyer | None) -> LayoutRegistry:
		return self.registries[ple.registry.parse_buyer(buyer_tag)]

	def render(
		self,
		fields: LabelFields,
		file_name: str,
		template_path: str | None = None,
	) -> list[RenderResult]:
		"""
		Render every document of one request.

		Args:
			fields: Raw label fields, including the buyer tag.
			file_name: Name of the originating order file.
			template_path: Explicit primary template path.

		Returns:
			Ordered list of rendered documents.
		"""
		return self.render_run(fields, file_name, template_path).results

	def render_run(
		self,
		fields: LabelFields,
		file_name: str,
		template_path: str | None = None,
	) -> AssemblyRun:
		"""
		Render a request and return the run with its state history.
		"""
		registry = self.registry_for(fields.buyer)
		run = AssemblyRun(registry=registry, fields=fields, file_name=file_name)
		run.advance(AssemblyState.RESOLVING_TEMPLATE)
		run.font = ple.assets.resolve_label_font(self.store, self.cache, self.config)
		run.templates = self.resolve_templates(registry, fields, template_path)
		for variant in registry.document_variants():
			run.advance(AssemblyState.NORMALIZING_FIELDS)
			if run.normalized is None:
				run.normalized = ple.normalize.normalize_fields(fields, self.rng, seed=file_name)
			values = registry.field_values(run.normalized, variant.layout_set)
			run.advance(AssemblyState.RESOLVING_LAYOUT)
			entries = registry.resolve_layout(run.normalized.product_key, variant.layout_set)
			run.advance(AssemblyState.DRAWING)
			run.results.append(self.draw_variant(run, variant, values, entries))
		run.advance(AssemblyState.DONE)
		return run

	def resolve_templates(
		self,
		registry: LayoutRegistry,
		fields: LabelFields,
		template_path: str | None,
	) -> dict[str, TemplateDescriptor | None]:
		"""
		Resolve every template the request needs before any drawing.
		"""
		templates: dict[str, TemplateDescriptor | None] = {}
		if not registry.uses_template():
			return templates
		override = template_path or self.config.template_override
		roles = {variant.template_role for variant in registry.document_variants()}
		for role in (ROLE_PRIMARY, ROLE_DETAIL):
			if role not in roles:
				continue
			templates[role] = ple.assets.resolve_template(
				self.store,
				self.cache,
				registry,
				product_name=fields.product_name,
				override_path=override,
				role=role,
			)
		return templates

	def draw_variant(
		self,
		run: AssemblyRun,
		variant: DocumentVariant,
		values: dict[str, str | None],
		entries: list[LayoutEntry],
	) -> RenderResult:
		"""
		Draw one document variant, degrading to blank-canvas documents.
		"""
		registry = run.registry
		fields = run.normalized
		font = run.font
		suffix = variant.variant_suffix
		if variant.template_role == ROLE_PRIMARY:
			template = run.templates.get(ROLE_PRIMARY)
			data = None
			if template is None or not entries:
				logger.warning(
					"No usable %s template for %r, rendering text document",
					registry.buyer.value,
					fields.product,
				)
			else:
				try:
					data = self.draw_template_page(template, font, registry, variant, values, entries, fields)
				except TEMPLATE_RENDER_ERRORS as error:
					logger.warning("Template %s failed to render, rendering text document: %s", template.path, error)
			if data is None:
				data = self.draw_lines_page(registry.lines(fields), registry.lines_config, registry.lines_align, font)
				suffix = registry.fallback_suffix()
		elif variant.template_role == ROLE_DETAIL:
			template = run.templates.get(ROLE_DETAIL)
			data = None
			if template is not None:
				try:
					data = self.draw_template_page(template, font, registry, variant, values, entries, fields)
				except TEMPLATE_RENDER_ERRORS as error:
					logger.warning("Detail template %s failed to render, drawing box grid: %s", template.path, error)
			if data is None:
				data = self.draw_detail_grid(registry, fields, font)
		elif variant.layout_set == LAYOUT_COMPACT:
			data = self.draw_compact_page(registry.compact_text(fields), font)
		elif variant.layout_set == LAYOUT_LINES:
			data = self.draw_lines_page(registry.lines(fields), registry.lines_config, registry.lines_align, font)
		else:
			raise ValueError(f"Unsupported document variant: {variant}")
		file_name = ple.filenames.build_label_file_name(
			run.file_name,
			variant_suffix=suffix,
			lot=ple.normalize.clean_value(run.fields.lot),
		)
		return RenderResult(data=data, file_name=file_name)

	def draw_template_page(
		self,
		template: TemplateDescriptor,
		font: LabelFont,
		registry: LayoutRegistry,
		variant: DocumentVariant,
		values: dict[str, str | None],
		entries: list[LayoutEntry],
		fields: NormalizedFields,
	) -> bytes:
		"""
		Draw positioned fields over a template page.

		Args:
			template: Resolved template.
			font: Label font.
			registry: Buyer registry.
			variant: Variant being drawn.
			values: Field values keyed by field key.
			entries: Resolved layout entries.
			fields: Normalized request fields.

		Returns:
			PDF bytes.
		"""
		canvas = PageCanvas(template, font)
		frame = registry.frame_for(variant.layout_set)
		for entry in entries:
			text = values.get(entry.field_key)
			if not text:
				continue
			placed = ple.transform.place_text(
				entry,
				text,
				canvas.width,
				canvas.height,
				canvas.text_width,
				grid=registry.grid,
				frame=frame,
			)
			canvas.draw_text(placed.text, placed.x, placed.y, placed.font_size)
		for draw in registry.extra_draws(fields.product_key, variant.layout_set):
			self.draw_barcode(canvas, draw, fields.barcode_payload, registry.grid)
		return canvas.finish()

	def draw_barcode(
		self,
		canvas: PageCanvas,
		draw: BarcodeDraw,
		payload: str | None,
		grid: ple.transform.DesignGrid,
	) -> None:
		"""
		Draw an EAN-13 symbol into a grid box, skipping invalid payloads.
		"""
		symbol = ple.barcode.encode_ean13(payload)
		if symbol is None:
			logger.debug("No valid barcode payload, skipping barcode")
			return
		left, bottom = grid.to_page(draw.x, draw.y + draw.height, canvas.width, canvas.height)
		width = grid.x_to_page(draw.width, canvas.width)
		height = draw.height * canvas.height / grid.ref_height
		module_width = width / ple.barcode.MODULE_COUNT
		for start, count in ple.barcode.pattern_to_bars(symbol.pattern):
			canvas.draw_rect(
				left + start * module_width,
				bottom,
				count * module_width,
				height,
				stroke=False,
				fill=True,
			)
		text_size = min(BARCODE_TEXT_MAX_SIZE, max(BARCODE_TEXT_MIN_SIZE, width * 0.08))
		text_width = canvas.text_width(symbol.digits, text_size)
		text_x = left + (width - text_width) / 2.0
		canvas.draw_text(symbol.digits, text_x, bottom - text_size - 1.0, text_size)

	def draw_lines_page(
		self,
		lines: list[TextLine],
		config: WhiteLabelConfig,
		default_align: str,
		font: LabelFont,
	) -> bytes:
		"""
		Draw stacked text lines on a blank page.

		Args:
			lines: Lines from top to bottom.
			config: Page geometry and default sizes.
			default_align: Alignment for lines without their own.
			font: Label font.

		Returns:
			PDF bytes.
		"""
		canvas = PageCanvas(ple.config.blank_template(config.width, config.height), font)
		cursor = config.height - config.margin
		for line in lines:
			size = line.size or config.body_size
			spacing = line.spacing or config.line_spacing
			cursor -= size
			y = max(cursor, config.margin / 2.0)
			text_width = canvas.text_width(line.text, size)
			align = line.align or default_align
			if align == "center":
				x = (config.width - text_width) / 2.0
			elif align == "right":
				x = config.width - config.margin - text_width
			else:
				x = config.margin
			x = max(config.margin, x)
			canvas.draw_text(line.text, x, y, size)
			cursor -= spacing
		return canvas.finish()

	def draw_compact_page(self, text: str, font: LabelFont) -> bytes:
		"""
		Draw the bold, underlined product and weight line of the 10x5 label.
		"""
		config = CENTERED_10X5_CONFIG
		canvas = PageCanvas(ple.config.blank_template(config.width, config.height), font)
		available = config.width - config.margin * 2.0
		size = config.title_size + COMPACT_TITLE_EXTRA
		text_width = canvas.text_width(text, size)
		size = ple.transform.fit_font_size(text_width, size, available, DEFAULT_TEXT_MIN_SIZE)
		text_width = canvas.text_width(text, size)
		x = max(config.margin, (config.width - text_width) / 2.0)
		y = (config.height - size * 0.7) / 2.0
		for dx, dy in COMPACT_BOLD_OFFSETS:
			canvas.draw_text(text, x + dx, y + dy, size)
		underline_y = y - size * 0.2
		start = max(config.margin, x - size * 0.1)
		end = min(config.width - config.margin, x + text_width + size * 0.1)
		canvas.draw_line(start, underline_y, end, underline_y, UNDERLINE_THICKNESS)
		return canvas.finish()

	def detail_boxes(self, registry: LayoutRegistry, fields: NormalizedFields) -> list[DetailBox]:
		"""
		Lay out the bordered boxes of the box-grid detail label.
		"""
		config = CENTERED_10X5_CONFIG
		values = registry.field_values(fields, ple.registry.LAYOUT_DETAIL)
		inner_width = config.width - DETAIL_PADDING * 2.0
		half_width = inner_width / 2.0
		left = DETAIL_PADDING
		right = DETAIL_PADDING + half_width
		weight = values.get(ple.registry.FIELD_WEIGHT) or registry.weight_for(fields)
		lot = values.get(ple.registry.FIELD_LOT) or EMPTY_BOX_VALUE
		agency = f"{DETAIL_AGENCY_CODE} · {registry.detail_units()} · {weight} · {lot}"
		if registry.detail_agency_suffix():
			agency = f"{agency} · {registry.detail_agency_suffix()}"
		rows = [
			[(f"Marca: {registry.brand_label}", fields.product, 24.0)],
			[("FECHA", fields.summary_date, 16.0), ("LOTE", lot, 16.0)],
			[
				("PESO", weight, 22.0),
				("EAN", values.get(ple.registry.FIELD_LABEL_CODE) or EMPTY_BOX_VALUE, 16.0),
			],
			[("CATEGORÍA", fields.category, 16.0), ("VARIEDAD", fields.variety, 16.0)],
			[("TRAZABILIDAD", fields.trace_code or EMPTY_BOX_VALUE, 16.0), ("ORIGEN", DETAIL_ORIGIN, 16.0)],
			[("AGENCIA", agency, 14.0)],
		]
		boxes = []
		top = config.height - DETAIL_PADDING
		for index, row in enumerate(rows):
			height = DETAIL_TOP_ROW_HEIGHT if index == 0 else DETAIL_ROW_HEIGHT
			if len(row) == 1:
				label, value, value_size = row[0]
				boxes.append(DetailBox(left, top, inner_width, height, label, value, value_size))
			else:
				for (label, value, value_size), x in zip(row, (left, right)):
					boxes.append(DetailBox(x, top, half_width, height, label, value, value_size))
			top -= height
		return boxes

	def draw_detail_grid(self, registry: LayoutRegistry, fields: NormalizedFields, font: LabelFont) -> bytes:
		config = CENTERED_10X5_CONFIG
		canvas = PageCanvas(ple.config.blank_template(config.width, config.height), font)
		for box in self.detail_boxes(registry, fields):
			canvas.draw_rect(box.x, box.top - box.height, box.width, box.height, line_width=DETAIL_BORDER_WIDTH)
			canvas.draw_text(box.label, box.x + 8.0, box.top - DETAIL_LABEL_SIZE - 6.0, DETAIL_LABEL_SIZE)
			value_width = canvas.text_width(box.value, box.value_size)
			value_size = ple.transform.fit_font_size(value_width, box.value_size, box.width - 16.0)
			canvas.draw_text(box.value, box.x + 8.0, box.top - value_size - 20.0, value_size)
		return canvas.finish()
