"""
Per-buyer layout tables and registries.

Grid entries are in design grid units (1262x768, origin top-left).
Millimetre entries are measured on the physical label from its
bottom-left corner and use absolute point sizes.
"""

# local repo modules
import packing_label_engine as ple
import packing_label_engine.barcode
import packing_label_engine.config
import packing_label_engine.normalize
import packing_label_engine.registry


LayoutEntry = ple.config.LayoutEntry
OverrideRule = ple.config.OverrideRule
DocumentVariant = ple.config.DocumentVariant
BarcodeDraw = ple.config.BarcodeDraw
TextLine = ple.config.TextLine
NormalizedFields = ple.normalize.NormalizedFields
LayoutRegistry = ple.registry.LayoutRegistry
Buyer = ple.registry.Buyer

LAYOUT_PRIMARY = ple.registry.LAYOUT_PRIMARY
LAYOUT_COMPACT = ple.registry.LAYOUT_COMPACT
LAYOUT_DETAIL = ple.registry.LAYOUT_DETAIL
LAYOUT_LINES = ple.registry.LAYOUT_LINES
ROLE_PRIMARY = ple.registry.ROLE_PRIMARY
ROLE_BLANK = ple.registry.ROLE_BLANK
ROLE_DETAIL = ple.registry.ROLE_DETAIL

FIELD_PACKING_DATE = ple.registry.FIELD_PACKING_DATE
FIELD_LOT = ple.registry.FIELD_LOT
FIELD_COC = ple.registry.FIELD_COC
FIELD_R_CODE = ple.registry.FIELD_R_CODE
FIELD_WEIGHT = ple.registry.FIELD_WEIGHT
FIELD_PRODUCT = ple.registry.FIELD_PRODUCT
FIELD_VARIETY = ple.registry.FIELD_VARIETY
FIELD_CATEGORY = ple.registry.FIELD_CATEGORY
FIELD_TRACE = ple.registry.FIELD_TRACE
FIELD_LABEL_CODE = ple.registry.FIELD_LABEL_CODE

DEFAULT_WEIGHT = ple.config.DEFAULT_WEIGHT
DEFAULT_TEMPLATE_NAMES = ple.config.DEFAULT_TEMPLATE_NAMES
WHITE_LABEL_CONFIGS = ple.config.WHITE_LABEL_CONFIGS
COMPANY_NAME = ple.config.COMPANY_NAME
COMPANY_ADDRESS = ple.config.COMPANY_ADDRESS
COC_NUMBER = ple.config.COC_NUMBER
ORIGIN_LINE = ple.config.ORIGIN_LINE
SMALL_PRODUCER_LINE = ple.config.SMALL_PRODUCER_LINE
SMALL_PRODUCER_NAME = ple.config.SMALL_PRODUCER_NAME
SMALL_ADDRESS = ple.config.SMALL_ADDRESS
LABEL_DATE_PLACEHOLDER = ple.config.LABEL_DATE_PLACEHOLDER
CODE_PLACEHOLDER = ple.config.CODE_PLACEHOLDER

# shared template layout for the template family buyers
TEMPLATE_LAYOUT = {
	FIELD_PACKING_DATE: LayoutEntry(FIELD_PACKING_DATE, 325.0, 415.0, 34.0),
	FIELD_LOT: LayoutEntry(FIELD_LOT, 215.0, 490.0, 34.0),
	FIELD_COC: LayoutEntry(FIELD_COC, 205.0, 630.0, 34.0),
	FIELD_R_CODE: LayoutEntry(FIELD_R_CODE, 1020.0, 505.0, 27.0),
	FIELD_WEIGHT: LayoutEntry(FIELD_WEIGHT, 235.0, 570.0, 37.0),
}
TEMPLATE_OFFSETS = {
	FIELD_PACKING_DATE: (18.0, -8.0),
	FIELD_LOT: (42.0, -25.0),
	FIELD_WEIGHT: (26.0, -35.0),
}
MERCADONA_R_CODE_OFFSET = (-15.0, -70.0)

# lidl prints the lot in the right hand panel
LIDL_LOT_ENTRY = LayoutEntry(FIELD_LOT, 946.5, 384.0, 44.0, align="center", min_x=60.0)
LIDL_LOT_OFFSET = (10.0, 5.0)
LIDL_LOT_PRODUCT_OFFSETS = {
	"cilantro": (-30.0, 40.0),
	"cebollino": (-30.0, 5.0),
	"eneldo": (-50.0, 25.0),
	"hierbahuerto": (-50.0, 40.0),
	"perejil": (-55.0, 20.0),
	"romero": (-28.0, 25.0),
}
LIDL_HIDDEN_WEIGHT = ("cebollino", "cilantro")
LIDL_WEIGHT_ENTRIES = {
	"eneldo": LayoutEntry(FIELD_WEIGHT, 896.5, 329.0, 110.0, align="center", min_x=60.0),
	"hierbahuerto": LayoutEntry(FIELD_WEIGHT, 916.5, 369.0, 90.0, align="center", min_x=60.0),
	"perejil": LayoutEntry(FIELD_WEIGHT, 891.5, 349.0, 90.0, align="center", min_x=60.0),
	"romero": LayoutEntry(FIELD_WEIGHT, 918.5, 344.0, 90.0, align="center", min_x=60.0),
}
LIDL_ALBAHACA_ENTRIES = (
	LayoutEntry(FIELD_PACKING_DATE, 906.5, 290.4, 28.0, align="right"),
	LayoutEntry(FIELD_LOT, 986.5, 290.4, 28.0, align="left"),
	LayoutEntry(FIELD_WEIGHT, 1041.5, 385.4, 36.0, align="center"),
)
LIDL_DEFAULT_WEIGHTS = {
	"albahaca": "60gr",
	"eneldo": "30g",
	"hierbahuerto": "40g",
	"perejil": "40g",
	"romero": "40g",
}
LIDL_PRODUCT_ALIASES = (
	("albahaca", "albahaca"),
	("cilantro", "cilantro"),
	("cebollino", "cebollino"),
	("eneldo", "eneldo"),
	("hierbabuena", "hierbahuerto"),
	("hierbahuerto", "hierbahuerto"),
	("perejil", "perejil"),
	("romero", "romero"),
)

# aldi generic layout, text block on the left and barcode bottom right
ALDI_LINE_KEYS = tuple(f"aldi_line_{index}" for index in range(1, 9))
ALDI_TITLE_ENTRY = LayoutEntry(FIELD_PRODUCT, 101.0, 154.0, 40.0)
ALDI_LINE_TOP = 194.0
ALDI_LINE_SPACING = 40.0
ALDI_BODY_SIZE = 30.0
ALDI_SMALL_SIZE = 24.0
ALDI_WEIGHT_ENTRY = LayoutEntry(FIELD_WEIGHT, 959.0, 154.0, ALDI_BODY_SIZE)
ALDI_BARCODE = BarcodeDraw(x=656.0, y=620.0, width=429.0, height=76.8)
ALDI_ARTICLE_LINE = "ART: 6007576    OPFH:1168"
ALDI_GGN_LINE = "GGN: 4063061564405"
ALDI_PACKER_LINE = "ENVASADO POR: MONTAÑA ROJA HERBS SAT536/05"
ALDI_ADDRESS_LINE = "C/CONSTITUCION 53 ARICO"
ALDI_ORIGIN_LINE = "ORIGEN: ESPAÑA/CANARIAS"
ALDI_AGENCY_SUFFIX = "35010"

# millimetre positions of the aldi produce templates
SPECIAL_BODY_SIZE = 5.5
SPECIAL_WEIGHT_NUDGE = 4.5
ALDI_SPECIAL_LAYOUTS = {
	# product: (lote_x, lote_y, peso_x, peso_offset, code_x, code_y)
	"acelgas": (33.84, 19.0, 24.0, 0.8, 15.0, 18.0),
	"albahaca": (33.84, 18.9, 43.0, 0.9, 15.0, 18.9),
	"cebollino": (34.84, 11.48, 44.22, 1.8, 16.0, 11.48),
	"cilantro": (34.84, 11.48, 44.22, 0.5, 16.0, 11.48),
	"eneldo": (34.84, 11.48, 44.22, 0.5, 16.0, 11.48),
	"hierbabuena": (34.84, 11.48, 44.22, 0.55, 16.0, 11.48),
	"hierbahuerto": (34.84, 11.48, 44.22, 0.55, 16.0, 11.48),
	"pakchoi": (34.84, 11.48, 44.22, 1.8, 16.0, 11.48),
	"perejil": (36.0, 11.6, 44.22, 0.55, 15.2, 11.48),
	"romero": (38.6, 11.6, 44.22, 0.9, 14.0, 11.48),
}
ALDI_SPECIAL_TEMPLATES = {
	"acelgas": "acelgasaldi.pdf",
	"albahaca": "albahacasaldi.pdf",
	"cebollino": "cebollinoaldi.pdf",
	"cilantro": "cilantroaldi.pdf",
	"eneldo": "eneldoaldi.pdf",
	"hierbabuena": "hierbahuertoaldi.pdf",
	"hierbahuerto": "hierbahuertoaldi.pdf",
	"pakchoi": "pakchoialdi.pdf",
	"perejil": "perejilaldi.pdf",
	"romero": "romeroaldi.pdf",
}
ALDI_PRODUCT_ALIASES = (
	("acelga", "acelgas"),
	("albahaca", "albahaca"),
	("cebollino", "cebollino"),
	("cilantro", "cilantro"),
	("eneldo", "eneldo"),
	("hierbabuena", "hierbabuena"),
	("hierbahuerto", "hierbahuerto"),
	("pakchoi", "pakchoi"),
	("perejil", "perejil"),
	("romero", "romero"),
)

# millimetre positions of the kanali produce templates
KANALI_BODY_SIZE = 6.5
KANALI_WEIGHT_OFFSET = 3.0
KANALI_LAYOUTS = {
	# product: (lote_x, lote_y, code_x, peso_x)
	"cilantro": (33.0, 19.0, 15.0, 20.0),
	"romero": (33.0, 20.5, 15.0, 25.5),
	"albahaca": (30.0, 18.5, 14.0, 11.0),
	"rucula": (33.0, 20.5, 15.0, 25.5),
	"cebollino": (33.0, 21.0, 15.0, 25.5),
	"perejil": (33.0, 19.0, 15.0, 19.5),
	"hierbahuerto": (33.0, 19.0, 15.0, 19.5),
}
KANALI_SPECIAL_TEMPLATES = {key: f"{key}kanali.pdf" for key in KANALI_LAYOUTS}
KANALI_DEFAULT_WEIGHTS = {"cilantro": "50gr"}

# secondary 100x50 mm box label
DETAIL_TEMPLATE_LAYOUT = {
	FIELD_PRODUCT: LayoutEntry(FIELD_PRODUCT, 50.0, 40.0, 14.0, align="center", units="mm"),
	FIELD_PACKING_DATE: LayoutEntry(FIELD_PACKING_DATE, 8.0, 30.0, 10.0, units="mm"),
	FIELD_LOT: LayoutEntry(FIELD_LOT, 58.0, 30.0, 10.0, units="mm"),
	FIELD_WEIGHT: LayoutEntry(FIELD_WEIGHT, 8.0, 21.0, 12.0, units="mm"),
	FIELD_LABEL_CODE: LayoutEntry(FIELD_LABEL_CODE, 58.0, 21.0, 10.0, units="mm"),
	FIELD_CATEGORY: LayoutEntry(FIELD_CATEGORY, 8.0, 12.0, 10.0, units="mm"),
	FIELD_VARIETY: LayoutEntry(FIELD_VARIETY, 58.0, 12.0, 10.0, units="mm"),
	FIELD_TRACE: LayoutEntry(FIELD_TRACE, 8.0, 4.0, 9.0, units="mm"),
}


#============================================
def match_product_alias(product_key: str, aliases: tuple[tuple[str, str], ...]) -> str:
	"""
	Map a product key onto the table key it contains, if any.

	Args:
		product_key: Normalized product key.
		aliases: (substring, table_key) pairs in priority order.

	Returns:
		Table key, or the product key unchanged.
	"""
	for needle, table_key in aliases:
		if needle in product_key:
			return table_key
	return product_key


#============================================
def offset_rule(
	buyer: Buyer,
	field_key: str,
	offset: tuple[float, float],
	product_key: str | None = None,
) -> OverrideRule:
	return OverrideRule(buyer.value, field_key, product_key=product_key, dx=offset[0], dy=offset[1])


#============================================
def suppress_rule(buyer: Buyer, field_key: str, product_key: str | None = None) -> OverrideRule:
	return OverrideRule(buyer.value, field_key, product_key=product_key, suppress=True)


#============================================
def replace_rule(buyer: Buyer, entry: LayoutEntry, product_key: str | None = None) -> OverrideRule:
	return OverrideRule(buyer.value, entry.field_key, product_key=product_key, replacement=entry)


#============================================
def detail_values(fields: NormalizedFields, lot: str, weight: str) -> dict[str, str | None]:
	"""
	Field values shared by the secondary box labels.
	"""
	symbol = ple.barcode.encode_ean13(fields.barcode_payload)
	return {
		FIELD_PRODUCT: fields.product,
		FIELD_PACKING_DATE: fields.summary_date,
		FIELD_LOT: lot,
		FIELD_WEIGHT: fields.box_weight or weight,
		FIELD_LABEL_CODE: symbol.digits if symbol else None,
		FIELD_CATEGORY: fields.category,
		FIELD_VARIETY: fields.variety,
		FIELD_TRACE: fields.trace_code,
	}


class TemplateFamilyRegistry(LayoutRegistry):
	"""Buyers printing onto the shared date/lot/weight template."""

	default_template_names = DEFAULT_TEMPLATE_NAMES
	def default_layout(self, layout_set: str) -> dict[str, LayoutEntry]:
		if layout_set == LAYOUT_PRIMARY:
			return dict(TEMPLATE_LAYOUT)
		return {}

	def override_rules(self) -> tuple[OverrideRule, ...]:
		rules = [offset_rule(self.buyer, key, value) for key, value in TEMPLATE_OFFSETS.items()]
		rules.append(suppress_rule(self.buyer, FIELD_COC))
		return tuple(rules)

	def field_values(self, fields: NormalizedFields, layout_set: str) -> dict[str, str | None]:
		return {
			FIELD_PACKING_DATE: fields.label_date,
			FIELD_LOT: fields.lot,
			FIELD_COC: fields.coc_code,
			FIELD_R_CODE: None,
			FIELD_WEIGHT: self.weight_for(fields),
		}

	def lines(self, fields: NormalizedFields) -> list[TextLine]:
		config = self.lines_config
		return [
			TextLine(fields.product, size=config.title_size),
			TextLine(f"Envasado: {fields.summary_date} · Lote: {fields.lot}"),
			TextLine(f"Peso: {self.weight_for(fields)}"),
			TextLine(COMPANY_NAME, size=config.small_size),
			TextLine(COMPANY_ADDRESS, size=config.small_size),
			TextLine(ORIGIN_LINE, size=config.small_size),
		]


class MercadonaRegistry(TemplateFamilyRegistry):
	buyer = Buyer.MERCADONA
	brand_label = "Mercadona"
	template_tag = "mercadona"

	def override_rules(self) -> tuple[OverrideRule, ...]:
		rules = super().override_rules()
		return rules + (offset_rule(self.buyer, FIELD_R_CODE, MERCADONA_R_CODE_OFFSET),)

	def field_values(self, fields: NormalizedFields, layout_set: str) -> dict[str, str | None]:
		values = super().field_values(fields, layout_set)
		r_code = fields.r_code or ple.normalize.build_r_code(fields.packing_date)
		values[FIELD_R_CODE] = ple.normalize.strip_r_prefix(r_code)
		return values


class HiperdinoRegistry(TemplateFamilyRegistry):
	buyer = Buyer.HIPERDINO
	brand_label = "Hiperdino"
	template_tag = "hiperdino"
	default_template_names = ("Etiqueta-Hiperdino.pdf",) + DEFAULT_TEMPLATE_NAMES

	def override_rules(self) -> tuple[OverrideRule, ...]:
		return super().override_rules() + (suppress_rule(self.buyer, FIELD_R_CODE),)


class LidlRegistry(TemplateFamilyRegistry):
	"""
	Lidl prints the lot in the right hand panel of the shared template and
	moves or hides fields per product. Each order also gets a compact
	weight label and a box detail label.
	"""

	buyer = Buyer.LIDL
	brand_label = "Lidl"
	template_tag = "lidl"
	default_template_names = ("Etiqueta-Lidl.pdf",) + DEFAULT_TEMPLATE_NAMES
	detail_template_names = ("Etiqueta-Lidl-Caja.pdf", "etiqueta-lidl-caja.pdf", "Etiqueta_Lidl_Caja.pdf")

	def layout_product_key(self, product_key: str) -> str:
		return match_product_alias(product_key, LIDL_PRODUCT_ALIASES)

	def document_variants(self) -> tuple[DocumentVariant, ...]:
		return (
			DocumentVariant("primary", LAYOUT_PRIMARY, ROLE_PRIMARY),
			DocumentVariant("compact", LAYOUT_COMPACT, ROLE_BLANK, "lidl-10x5-peso"),
			DocumentVariant("detail", LAYOUT_DETAIL, ROLE_DETAIL, "lidl-10x5-detalle"),
		)

	def default_layout(self, layout_set: str) -> dict[str, LayoutEntry]:
		if layout_set == LAYOUT_DETAIL:
			return dict(DETAIL_TEMPLATE_LAYOUT)
		layout = super().default_layout(layout_set)
		if layout_set == LAYOUT_PRIMARY:
			layout[FIELD_LOT] = LIDL_LOT_ENTRY
		return layout

	def override_rules(self) -> tuple[OverrideRule, ...]:
		buyer = self.buyer
		rules = [
			offset_rule(buyer, FIELD_PACKING_DATE, TEMPLATE_OFFSETS[FIELD_PACKING_DATE]),
			offset_rule(buyer, FIELD_WEIGHT, TEMPLATE_OFFSETS[FIELD_WEIGHT]),
			offset_rule(buyer, FIELD_LOT, LIDL_LOT_OFFSET),
			suppress_rule(buyer, FIELD_COC),
			suppress_rule(buyer, FIELD_R_CODE),
		]
		for product_key, offset in LIDL_LOT_PRODUCT_OFFSETS.items():
			rules.append(offset_rule(buyer, FIELD_LOT, offset, product_key))
			rules.append(suppress_rule(buyer, FIELD_PACKING_DATE, product_key))
		for product_key in LIDL_HIDDEN_WEIGHT:
			rules.append(suppress_rule(buyer, FIELD_WEIGHT, product_key))
		for product_key, entry in LIDL_WEIGHT_ENTRIES.items():
			rules.append(replace_rule(buyer, entry, product_key))
		for entry in LIDL_ALBAHACA_ENTRIES:
			rules.append(replace_rule(buyer, entry, "albahaca"))
		return tuple(rules)

	def weight_for(self, fields: NormalizedFields) -> str:
		layout_key = self.layout_product_key(fields.product_key)
		default = LIDL_DEFAULT_WEIGHTS.get(layout_key, DEFAULT_WEIGHT)
		return ple.normalize.resolve_weight(fields.weight, default)

	def field_values(self, fields: NormalizedFields, layout_set: str) -> dict[str, str | None]:
		if layout_set == LAYOUT_DETAIL:
			return detail_values(fields, fields.lot, self.weight_for(fields))
		return super().field_values(fields, layout_set)


class AldiRegistry(LayoutRegistry):
	"""
	Aldi prints a full text block for most products and uses dedicated
	produce templates, positioned in millimetres, for the herbs range.
	"""

	buyer = Buyer.ALDI
	brand_label = "Aldi"
	template_tag = "aldi"
	default_template_names = ("Etiqueta-Aldi.pdf", "etiqueta-aldi.pdf", "Etiqueta_Aldi.pdf")
	detail_template_names = ("Etiqueta-Aldi-Caja.pdf", "etiqueta-aldi-caja.pdf", "Etiqueta_Aldi_Caja.pdf")
	special_templates = ALDI_SPECIAL_TEMPLATES

	def layout_product_key(self, product_key: str) -> str:
		return match_product_alias(product_key, ALDI_PRODUCT_ALIASES)

	def document_variants(self) -> tuple[DocumentVariant, ...]:
		return (
			DocumentVariant("primary", LAYOUT_PRIMARY, ROLE_PRIMARY),
			DocumentVariant("compact", LAYOUT_COMPACT, ROLE_BLANK, "aldi-10x5-peso"),
			DocumentVariant("detail", LAYOUT_DETAIL, ROLE_DETAIL, "aldi-10x5-detalle"),
		)

	def default_layout(self, layout_set: str) -> dict[str, LayoutEntry]:
		if layout_set == LAYOUT_DETAIL:
			return dict(DETAIL_TEMPLATE_LAYOUT)
		if layout_set != LAYOUT_PRIMARY:
			return {}
		layout = {FIELD_PRODUCT: ALDI_TITLE_ENTRY}
		for index, key in enumerate(ALDI_LINE_KEYS):
			size = ALDI_BODY_SIZE
			if index >= len(ALDI_LINE_KEYS) - 2:
				size = ALDI_SMALL_SIZE
			y = ALDI_LINE_TOP + index * ALDI_LINE_SPACING
			layout[key] = LayoutEntry(key, ALDI_TITLE_ENTRY.x, y, size)
		layout[FIELD_WEIGHT] = ALDI_WEIGHT_ENTRY
		return layout

	def override_rules(self) -> tuple[OverrideRule, ...]:
		buyer = self.buyer
		rules = []
		for product_key, values in ALDI_SPECIAL_LAYOUTS.items():
			lote_x, lote_y, peso_x, peso_offset, code_x, code_y = values
			rules.append(suppress_rule(buyer, FIELD_PRODUCT, product_key))
			for line_key in ALDI_LINE_KEYS:
				rules.append(suppress_rule(buyer, line_key, product_key))
			lot_entry = LayoutEntry(FIELD_LOT, lote_x, lote_y, SPECIAL_BODY_SIZE, units="mm")
			trace_entry = LayoutEntry(FIELD_TRACE, code_x, code_y, SPECIAL_BODY_SIZE, units="mm")
			weight_entry = LayoutEntry(
				FIELD_WEIGHT,
				peso_x,
				lote_y,
				SPECIAL_BODY_SIZE,
				units="mm",
				nudge_y=SPECIAL_WEIGHT_NUDGE * peso_offset,
			)
			rules.append(replace_rule(buyer, lot_entry, product_key))
			rules.append(replace_rule(buyer, trace_entry, product_key))
			rules.append(replace_rule(buyer, weight_entry, product_key))
		return tuple(rules)

	def extra_draws(self, product_key: str, layout_set: str) -> tuple[BarcodeDraw, ...]:
		if layout_set != LAYOUT_PRIMARY:
			return ()
		if self.layout_product_key(product_key) in ALDI_SPECIAL_LAYOUTS:
			return ()
		return (ALDI_BARCODE,)

	def detail_units(self) -> str:
		return "2 uds"

	def detail_agency_suffix(self) -> str:
		return ALDI_AGENCY_SUFFIX

	def block_lines(self, fields: NormalizedFields) -> list[str]:
		"""
		Text of the eight line block of the generic layout.
		"""
		lot_text = f"LOTE ALDI: {fields.aldi_lot}"
		if fields.trace_code:
			lot_text = f"TRAZABILIDAD: {fields.trace_code}    {lot_text}"
		return [
			f"CATEGORIA: {fields.category}    VARIEDAD: {fields.variety}",
			ALDI_ORIGIN_LINE,
			lot_text,
			ALDI_PACKER_LINE,
			ALDI_ADDRESS_LINE,
			ALDI_ARTICLE_LINE,
			ALDI_GGN_LINE,
			f"CoC: {fields.coc_code or COC_NUMBER}",
		]

	def field_values(self, fields: NormalizedFields, layout_set: str) -> dict[str, str | None]:
		weight = self.weight_for(fields)
		if layout_set == LAYOUT_DETAIL:
			return detail_values(fields, fields.aldi_lot, weight)
		values: dict[str, str | None] = {
			FIELD_PRODUCT: fields.product,
			FIELD_WEIGHT: weight,
			FIELD_LOT: fields.aldi_lot,
			FIELD_TRACE: fields.trace_code,
		}
		values.update(zip(ALDI_LINE_KEYS, self.block_lines(fields)))
		return values

	def lines(self, fields: NormalizedFields) -> list[TextLine]:
		return [
			TextLine(f"LOTE ALDI: {fields.aldi_lot}"),
			TextLine(f"CÓDIGO E: {fields.trace_code or CODE_PLACEHOLDER}"),
			TextLine(f"PESO: {self.weight_for(fields)}"),
			TextLine(f"COC: {fields.coc_code or COC_NUMBER}"),
		]


class KanaliRegistry(LayoutRegistry):
	"""
	Kanali only has produce templates; other products get the text
	document.
	"""

	buyer = Buyer.KANALI
	brand_label = "Kanali"
	template_tag = "kanali"
	default_template_names = ("Etiqueta-Kanali.pdf", "etiqueta-kanali.pdf", "Etiqueta_Kanali.pdf")
	special_templates = KANALI_SPECIAL_TEMPLATES

	def layout_product_key(self, product_key: str) -> str:
		for table_key in KANALI_LAYOUTS:
			if table_key in product_key:
				return table_key
		return product_key

	def override_rules(self) -> tuple[OverrideRule, ...]:
		buyer = self.buyer
		rules = []
		for product_key, values in KANALI_LAYOUTS.items():
			lote_x, lote_y, code_x, peso_x = values
			entries = (
				LayoutEntry(FIELD_LOT, lote_x, lote_y, KANALI_BODY_SIZE, units="mm"),
				LayoutEntry(FIELD_PACKING_DATE, code_x, lote_y, KANALI_BODY_SIZE, units="mm"),
				LayoutEntry(
					FIELD_WEIGHT,
					peso_x,
					lote_y,
					KANALI_BODY_SIZE,
					units="mm",
					nudge_y=SPECIAL_WEIGHT_NUDGE * KANALI_WEIGHT_OFFSET,
				),
			)
			for entry in entries:
				rules.append(replace_rule(buyer, entry, product_key))
		return tuple(rules)

	def weight_for(self, fields: NormalizedFields) -> str:
		layout_key = self.layout_product_key(fields.product_key)
		default = KANALI_DEFAULT_WEIGHTS.get(layout_key, DEFAULT_WEIGHT)
		weight = ple.normalize.resolve_weight(fields.weight, default)
		# the generic default counts as unset
		if weight.replace(" ", "").lower() == DEFAULT_WEIGHT.lower():
			return default
		return weight

	def field_values(self, fields: NormalizedFields, layout_set: str) -> dict[str, str | None]:
		return {
			FIELD_LOT: fields.week_day_lot,
			FIELD_PACKING_DATE: fields.label_date or LABEL_DATE_PLACEHOLDER,
			FIELD_WEIGHT: self.weight_for(fields),
		}

	def lines(self, fields: NormalizedFields) -> list[TextLine]:
		return [
			TextLine(f"LOTE KANALI: {fields.week_day_lot}"),
			TextLine(f"FECHA ENVASADO: {fields.label_date or LABEL_DATE_PLACEHOLDER}"),
			TextLine(f"PESO: {self.weight_for(fields)}"),
		]


class WhiteLargeRegistry(LayoutRegistry):
	buyer = Buyer.WHITE_LARGE

	def uses_template(self) -> bool:
		return False

	def document_variants(self) -> tuple[DocumentVariant, ...]:
		return (DocumentVariant("label", LAYOUT_LINES, ROLE_BLANK),)

	def lines(self, fields: NormalizedFields) -> list[TextLine]:
		config = self.lines_config
		return [
			TextLine(fields.product, size=config.title_size),
			TextLine(f"Categoría {fields.category} · Variedad: {fields.variety} · Sin/SEM"),
			TextLine("Calibre 3"),
			TextLine(f"Envasado: {fields.summary_date} · Lote: {fields.lot}"),
			TextLine(COMPANY_NAME, size=config.small_size),
			TextLine(COMPANY_ADDRESS, size=config.small_size),
			TextLine(ORIGIN_LINE, size=config.small_size),
		]


class WhiteSmallRegistry(WhiteLargeRegistry):
	buyer = Buyer.WHITE_SMALL
	lines_config = WHITE_LABEL_CONFIGS["blanca-pequena"]
	lines_align = "center"

	def lines(self, fields: NormalizedFields) -> list[TextLine]:
		config = self.lines_config
		return [
			TextLine(fields.product, size=config.title_size),
			TextLine(f"Variedad: {fields.variety}"),
			TextLine(f"Envasado: {fields.summary_date}"),
			TextLine(f"Lote: {fields.lot}"),
			TextLine(SMALL_PRODUCER_LINE, size=config.small_size),
			TextLine(SMALL_PRODUCER_NAME),
			TextLine(SMALL_ADDRESS, size=config.small_size),
			TextLine("Origen: España (Canarias)", size=config.small_size),
		]


REGISTRY_CLASSES = {
	Buyer.MERCADONA: MercadonaRegistry,
	Buyer.ALDI: AldiRegistry,
	Buyer.LIDL: LidlRegistry,
	Buyer.HIPERDINO: HiperdinoRegistry,
	Buyer.KANALI: KanaliRegistry,
	Buyer.WHITE_LARGE: WhiteLargeRegistry,
	Buyer.WHITE_SMALL: WhiteSmallRegistry,
}


#============================================
def build_registries() -> dict[Buyer, LayoutRegistry]:
	"""
	Instantiate one registry per buyer.
	"""
	return {buyer: registry_class() for buyer, registry_class in REGISTRY_CLASSES.items()}
