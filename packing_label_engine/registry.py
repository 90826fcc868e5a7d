"""
Layout registry interface, buyer parsing and override resolution.
"""

# Standard Library
import dataclasses
import enum

# local repo modules
import packing_label_engine as ple
import packing_label_engine.config
import packing_label_engine.normalize
import packing_label_engine.transform


LayoutEntry = ple.config.LayoutEntry
OverrideRule = ple.config.OverrideRule
DocumentVariant = ple.config.DocumentVariant
BarcodeDraw = ple.config.BarcodeDraw
TextLine = ple.config.TextLine
NormalizedFields = ple.normalize.NormalizedFields
MillimetreFrame = ple.transform.MillimetreFrame

LAYOUT_PRIMARY = "primary"
LAYOUT_COMPACT = "compact"
LAYOUT_DETAIL = "detail"
LAYOUT_LINES = "lines"

ROLE_PRIMARY = "primary"
ROLE_BLANK = "blank"
ROLE_DETAIL = "detail"

FIELD_PACKING_DATE = "packing_date"
FIELD_LOT = "lot"
FIELD_COC = "coc_code"
FIELD_R_CODE = "r_code"
FIELD_WEIGHT = "weight"
FIELD_PRODUCT = "product"
FIELD_VARIETY = "variety"
FIELD_CATEGORY = "category"
FIELD_TRACE = "trace_code"
FIELD_LABEL_CODE = "label_code"


class Buyer(enum.Enum):
	MERCADONA = "mercadona"
	ALDI = "aldi"
	LIDL = "lidl"
	HIPERDINO = "hiperdino"
	KANALI = "kanali"
	WHITE_LARGE = "blanca-grande"
	WHITE_SMALL = "blanca-pequena"


class UnknownBuyerError(ValueError):
	"""Raised for a buyer tag that maps to no registry."""


# substring aliases checked in order; white-label spellings first
BUYER_ALIASES = (
	("blancagrande", Buyer.WHITE_LARGE),
	("blancapequena", Buyer.WHITE_SMALL),
	("mercadona", Buyer.MERCADONA),
	("aldi", Buyer.ALDI),
	("lidl", Buyer.LIDL),
	("hiperdino", Buyer.HIPERDINO),
	("kanali", Buyer.KANALI),
)


#============================================
def parse_buyer(value: str | Buyer | None) -> Buyer:
	"""
	Map a free-form buyer tag onto a Buyer.

	Args:
		value: Tag such as "Lidl Canarias", or a Buyer.

	Returns:
		Buyer, MERCADONA for an empty tag.
	"""
	if isinstance(value, Buyer):
		return value
	key = ple.normalize.normalize_product_key(value)
	if not key:
		return Buyer.MERCADONA
	for alias, buyer in BUYER_ALIASES:
		if alias in key:
			return buyer
	raise UnknownBuyerError(f"Unknown buyer tag: {value!r}")


class LayoutRegistry:
	"""
	Layout rules of one buyer.

	Subclasses provide default layouts per layout set and override rules;
	resolve_entry combines them. Suppression wins over any positional
	override, and product rules win over buyer rules.
	"""

	buyer = Buyer.MERCADONA
	brand_label = ""
	template_tag = ""
	default_template_names: tuple[str, ...] = ()
	detail_template_names: tuple[str, ...] = ()
	special_templates: dict[str, str] = {}
	grid = ple.transform.PRIMARY_GRID
	primary_frame = ple.transform.PRIMARY_FRAME
	detail_frame = ple.transform.DETAIL_FRAME
	lines_config = ple.config.WHITE_LABEL_CONFIGS["blanca-grande"]
	lines_align = "left"

	def layout_product_key(self, product_key: str) -> str:
		return product_key

	def special_template_for(self, product_key: str) -> str | None:
		return self.special_templates.get(self.layout_product_key(product_key))

	def uses_template(self) -> bool:
		return True

	def document_variants(self) -> tuple[DocumentVariant, ...]:
		return (DocumentVariant("primary", LAYOUT_PRIMARY, ROLE_PRIMARY),)

	def default_layout(self, layout_set: str) -> dict[str, LayoutEntry]:
		return {}

	def override_rules(self) -> tuple[OverrideRule, ...]:
		return ()

	def frame_for(self, layout_set: str) -> MillimetreFrame:
		if layout_set == LAYOUT_DETAIL:
			return self.detail_frame
		return self.primary_frame

	def field_values(self, fields: NormalizedFields, layout_set: str) -> dict[str, str | None]:
		return {}

	def extra_draws(self, product_key: str, layout_set: str) -> tuple[BarcodeDraw, ...]:
		return ()

	def lines(self, fields: NormalizedFields) -> list[TextLine]:
		"""Lines of the blank-canvas text document."""
		return []

	def fallback_suffix(self) -> str:
		return f"{self.buyer.value}-fallback"

	def compact_text(self, fields: NormalizedFields) -> str:
		return f"{fields.product} {self.weight_for(fields)}"

	def weight_for(self, fields: NormalizedFields) -> str:
		return ple.normalize.resolve_weight(fields.weight, ple.config.DEFAULT_WEIGHT)

	def detail_units(self) -> str:
		return "1 ud"

	def detail_agency_suffix(self) -> str:
		return ""

	def _matching_rules(self, field_key: str, product_key: str, layout_set: str) -> list[OverrideRule]:
		rules = []
		for rule in self.override_rules():
			if rule.buyer != self.buyer.value or rule.field_key != field_key:
				continue
			if rule.layout_set != layout_set:
				continue
			if rule.product_key is not None and rule.product_key != product_key:
				continue
			rules.append(rule)
		return rules

	def resolve_entry(self, field_key: str, product_key: str, layout_set: str) -> LayoutEntry | None:
		"""
		Resolve the effective layout entry of one field.

		Args:
			field_key: Field to place.
			product_key: Normalized product key.
			layout_set: Layout set being drawn.

		Returns:
			LayoutEntry, or None when the field is suppressed or has no layout.
		"""
		layout_key = self.layout_product_key(product_key)
		rules = self._matching_rules(field_key, layout_key, layout_set)
		if any(rule.suppress for rule in rules):
			return None
		base = self.default_layout(layout_set).get(field_key)
		product_rules = [rule for rule in rules if rule.product_key is not None]
		chosen = None
		if product_rules:
			chosen = product_rules[-1]
		elif rules:
			chosen = rules[-1]
		if chosen is None:
			return base
		entry = chosen.replacement or base
		if entry is None:
			return None
		if chosen.dx or chosen.dy:
			entry = dataclasses.replace(entry, x=entry.x + chosen.dx, y=entry.y + chosen.dy)
		return entry

	def resolve_layout(self, product_key: str, layout_set: str) -> list[LayoutEntry]:
		"""
		Resolve every drawable entry of a layout set, in stable order.
		"""
		layout_key = self.layout_product_key(product_key)
		field_keys = list(self.default_layout(layout_set))
		for rule in self.override_rules():
			if rule.replacement is None or rule.layout_set != layout_set:
				continue
			if rule.product_key not in (None, layout_key):
				continue
			if rule.field_key not in field_keys:
				field_keys.append(rule.field_key)
		entries = []
		for field_key in field_keys:
			entry = self.resolve_entry(field_key, product_key, layout_set)
			if entry is not None:
				entries.append(entry)
		return entries
