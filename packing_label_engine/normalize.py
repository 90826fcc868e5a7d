"""
Field normalization: dates, lots, codes, weights and display values.
"""

# Standard Library
import dataclasses
import datetime
import logging
import random
import re
import string
import unicodedata

# local repo modules
import packing_label_engine as ple
import packing_label_engine.barcode
import packing_label_engine.config


LabelFields = ple.config.LabelFields

LOT_PREFIX_LENGTH = ple.config.LOT_PREFIX_LENGTH
LOT_NUMBER_LENGTH = ple.config.LOT_NUMBER_LENGTH
LEGACY_LOT_NUMBER_LENGTH = ple.config.LEGACY_LOT_NUMBER_LENGTH
TRACE_PREFIX = ple.config.TRACE_PREFIX
TRACE_LENGTH = ple.config.TRACE_LENGTH
R_CODE_DELIVERY_DAYS = ple.config.R_CODE_DELIVERY_DAYS
R_CODE_SATURDAY_DELIVERY_DAYS = ple.config.R_CODE_SATURDAY_DELIVERY_DAYS
DEFAULT_CATEGORY = ple.config.DEFAULT_CATEGORY
PRODUCT_PLACEHOLDER = ple.config.PRODUCT_PLACEHOLDER
VARIETY_PLACEHOLDER = ple.config.VARIETY_PLACEHOLDER
DATE_PLACEHOLDER = ple.config.DATE_PLACEHOLDER

ISO_DATE_PATTERN = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
LOCALE_DATE_PATTERN = re.compile(r"^(\d{1,2})[./-](\d{1,2})[./-](\d{2,4})$")
LOT_PATTERN = re.compile(rf"^[A-Z]{{{LOT_PREFIX_LENGTH}}}\d{{{LOT_NUMBER_LENGTH}}}$")
LEGACY_LOT_PATTERN = re.compile(rf"^([A-Z]{{{LOT_PREFIX_LENGTH}}})(\d{{{LEGACY_LOT_NUMBER_LENGTH}}})$")
WEEK_DAY_LOT_PATTERN = re.compile(r"^(\d{1,2})/(\d{1,2})$")
R_PREFIX_PATTERN = re.compile(r"^R\s*-?\s*", re.IGNORECASE)

logger = logging.getLogger(__name__)


@dataclasses.dataclass
class NormalizedFields:
	"""Request values in the forms the layouts draw."""

	label_date: str | None
	summary_date: str
	packing_date: datetime.date | None
	lot: str
	week_day_lot: str
	aldi_lot: str
	trace_code: str | None
	r_code: str | None
	product: str
	product_key: str
	variety: str
	category: str
	weight: str | None
	box_weight: str | None
	coc_code: str | None
	label_code: str | None
	barcode_payload: str | None


#============================================
def clean_value(value: str | None) -> str | None:
	"""
	Trim a raw value, mapping empty strings to None.
	"""
	if value is None:
		return None
	trimmed = str(value).strip()
	if not trimmed:
		return None
	return trimmed


#============================================
def _split_date(value: str) -> tuple[str, str, str] | None:
	"""
	Split a recognized date into (day, month, year) strings.
	"""
	iso_match = ISO_DATE_PATTERN.match(value)
	if iso_match:
		year, month, day = iso_match.groups()
		return day, month, year
	locale_match = LOCALE_DATE_PATTERN.match(value)
	if locale_match:
		day, month, year = locale_match.groups()
		return day.zfill(2), month.zfill(2), year
	return None


#============================================
def format_label_date(value: str | None) -> str | None:
	"""
	Format a packing date as DD.MM.YY for label templates.

	Args:
		value: ISO or D/M/Y style date.

	Returns:
		Formatted date, the trimmed input when unparseable, or None.
	"""
	trimmed = clean_value(value)
	if trimmed is None:
		return None
	parts = _split_date(trimmed)
	if parts is None:
		return trimmed
	day, month, year = parts
	short_year = year[-2:].zfill(2)
	return f"{day}.{month}.{short_year}"


#============================================
def format_summary_date(value: str | None) -> str | None:
	"""
	Format a packing date as DD/MM/YYYY for text documents.

	Args:
		value: ISO or D/M/Y style date.

	Returns:
		Formatted date, the trimmed input when unparseable, or None.
	"""
	trimmed = clean_value(value)
	if trimmed is None:
		return None
	parts = _split_date(trimmed)
	if parts is None:
		return trimmed
	day, month, year = parts
	if len(year) == 2:
		year = f"20{year}"
	return f"{day}/{month}/{year}"


#============================================
def parse_packing_date(value: str | None) -> datetime.date | None:
	"""
	Parse a packing date into a date, or None when it cannot be read.
	"""
	trimmed = clean_value(value)
	if trimmed is None:
		return None
	parts = _split_date(trimmed)
	if parts is None:
		return None
	day, month, year = parts
	year_number = int(year)
	if len(year) == 2:
		year_number += 2000
	try:
		return datetime.date(year_number, int(month), int(day))
	except ValueError:
		return None


#============================================
def generate_lot(seed: str | None, rng: random.Random) -> str:
	"""
	Generate a canonical lot code.

	The two letter prefix comes from the first letters of the seed when it
	has enough of them, otherwise from the generator.

	Args:
		seed: Seed text, usually the order file name.
		rng: Random source for missing letters and the digits.

	Returns:
		Lot code of two letters and five digits.
	"""
	letters = [char.upper() for char in (seed or "") if char.isascii() and char.isalpha()]
	if len(letters) >= LOT_PREFIX_LENGTH:
		prefix = "".join(letters[:LOT_PREFIX_LENGTH])
	else:
		prefix = "".join(rng.choice(string.ascii_uppercase) for _ in range(LOT_PREFIX_LENGTH))
	digits = "".join(str(rng.randrange(10)) for _ in range(LOT_NUMBER_LENGTH))
	return prefix + digits


#============================================
def match_lot(value: str | None) -> str | None:
	"""
	Return the canonical form of a supplied lot, or None if it is not one.
	"""
	trimmed = clean_value(value)
	if trimmed is None:
		return None
	compact = re.sub(r"[^A-Z0-9]", "", trimmed.upper())
	if LOT_PATTERN.match(compact):
		return compact
	legacy_match = LEGACY_LOT_PATTERN.match(compact)
	if legacy_match:
		prefix, number = legacy_match.groups()
		return prefix + number.zfill(LOT_NUMBER_LENGTH)
	return None


#============================================
def normalize_lot(value: str | None, seed: str | None, rng: random.Random) -> str:
	"""
	Resolve a lot into canonical form, generating one when needed.

	Args:
		value: Supplied lot.
		seed: Seed text for generated lot letters.
		rng: Random source used only when a lot is generated.

	Returns:
		Canonical lot code.
	"""
	matched = match_lot(value)
	if matched is not None:
		return matched
	generated = generate_lot(seed, rng)
	logger.debug("Generated lot %s for input %r", generated, value)
	return generated


#============================================
def normalize_week_day_lot(value: str | None) -> str | None:
	"""
	Zero pad a WW/DD lot, or None when the value is not in that form.
	"""
	trimmed = clean_value(value)
	if trimmed is None:
		return None
	match = WEEK_DAY_LOT_PATTERN.match(trimmed)
	if not match:
		return None
	week, day = match.groups()
	return f"{week.zfill(2)}/{day.zfill(2)}"


#============================================
def build_week_day_lot(
	packing_date: datetime.date | None,
	lot_value: str | None,
	canonical_lot: str,
) -> str:
	"""
	Build a WW/DD lot from the ISO week and day of the packing date.

	The packing date wins over a lot already in slash form.

	Args:
		packing_date: Parsed packing date.
		lot_value: Raw lot, used without a date when in slash form or as digits.
		canonical_lot: Lot to fall back to.

	Returns:
		WW/DD lot or the canonical lot.
	"""
	if packing_date is not None:
		week = packing_date.isocalendar()[1]
		return f"{week:02d}/{packing_date.day:02d}"
	explicit = normalize_week_day_lot(lot_value)
	if explicit is not None:
		return explicit
	digits = re.sub(r"\D", "", lot_value or "")
	if 3 <= len(digits) <= 4:
		padded = digits.zfill(4)
		return f"{padded[:2]}/{padded[2:]}"
	return canonical_lot


#============================================
def build_trace_code(*sources: str | None) -> str | None:
	"""
	Build an E code from the first source holding digits.

	Args:
		sources: Candidate values in priority order.

	Returns:
		Trace code such as E01234, or None.
	"""
	for source in sources:
		digits = re.sub(r"\D", "", source or "")
		if digits:
			return TRACE_PREFIX + digits[-TRACE_LENGTH:].zfill(TRACE_LENGTH)
	return None


#============================================
def build_r_code(packing_date: datetime.date | None) -> str | None:
	"""
	Derive the R code from the expected delivery day.

	Delivery is four days after packing, five when packing on a Saturday.
	"""
	if packing_date is None:
		return None
	offset = R_CODE_DELIVERY_DAYS
	if packing_date.weekday() == 5:
		offset = R_CODE_SATURDAY_DELIVERY_DAYS
	delivery = packing_date + datetime.timedelta(days=offset)
	return f"R-{delivery.day}"


#============================================
def strip_r_prefix(value: str | None) -> str | None:
	trimmed = clean_value(value)
	if trimmed is None:
		return None
	stripped = R_PREFIX_PATTERN.sub("", trimmed).strip()
	return stripped or None


#============================================
def resolve_weight(value: str | None, default: str) -> str:
	"""
	Return the supplied weight or the given default.
	"""
	trimmed = clean_value(value)
	if trimmed is None:
		return default
	return trimmed


#============================================
def normalize_product_key(value: str | None) -> str:
	"""
	Reduce a product name to a lowercase ASCII key.

	Args:
		value: Product name.

	Returns:
		Key with accents and non alphanumerics removed.
	"""
	if not value:
		return ""
	decomposed = unicodedata.normalize("NFKD", value)
	ascii_text = decomposed.encode("ascii", "ignore").decode("ascii")
	return re.sub(r"[^a-z0-9]", "", ascii_text.lower())


#============================================
def barcode_payload(value: str | None) -> str | None:
	"""
	Extract a usable twelve digit EAN payload from a label code.

	Args:
		value: Raw label code with 12 or 13 digits.

	Returns:
		Twelve digit payload or None.
	"""
	if value is None:
		return None
	compact = re.sub(r"\s", "", value)
	if not compact.isdigit() or not compact.isascii():
		return None
	if len(compact) == 12:
		return compact
	if len(compact) == 13:
		payload = compact[:12]
		if ple.barcode.compute_check_digit(payload) == int(compact[12]):
			return payload
	return None


#============================================
def normalize_fields(
	fields: LabelFields,
	rng: random.Random,
	seed: str | None = None,
) -> NormalizedFields:
	"""
	Normalize every request field once.

	Args:
		fields: Raw request fields.
		rng: Random source for generated lots.
		seed: Seed text for generated lot letters.

	Returns:
		NormalizedFields shared by every document of the request.
	"""
	packing_date = parse_packing_date(fields.packing_date)
	lot = normalize_lot(fields.lot, seed, rng)
	raw_lot = clean_value(fields.lot)
	product = clean_value(fields.product_name)
	variety = clean_value(fields.variety)
	category = clean_value(fields.category)
	label_code = clean_value(fields.label_code)
	return NormalizedFields(
		label_date=format_label_date(fields.packing_date),
		summary_date=format_summary_date(fields.packing_date) or DATE_PLACEHOLDER,
		packing_date=packing_date,
		lot=lot,
		week_day_lot=build_week_day_lot(packing_date, raw_lot, lot),
		aldi_lot=normalize_week_day_lot(raw_lot) or lot,
		trace_code=build_trace_code(fields.r_code, raw_lot),
		r_code=clean_value(fields.r_code),
		product=product.upper() if product else PRODUCT_PLACEHOLDER,
		product_key=normalize_product_key(product),
		variety=variety.upper() if variety else VARIETY_PLACEHOLDER,
		category=category.upper() if category else DEFAULT_CATEGORY,
		weight=clean_value(fields.weight),
		box_weight=clean_value(fields.box_weight),
		coc_code=clean_value(fields.coc_code),
		label_code=label_code,
		barcode_payload=barcode_payload(label_code),
	)
