"""
Asset access: byte cache, template resolution and font registration.
"""

# Standard Library
import dataclasses
import hashlib
import io
import logging
import pathlib
import threading
from typing import Callable

# PIP3 modules
import PIL.Image
import pypdf
import pypdf.errors
import reportlab.pdfbase.pdfmetrics
import reportlab.pdfbase.ttfonts

# local repo modules
import packing_label_engine as ple
import packing_label_engine.config
import packing_label_engine.normalize
import packing_label_engine.registry


EngineConfig = ple.config.EngineConfig
TemplateDescriptor = ple.config.TemplateDescriptor
LayoutRegistry = ple.registry.LayoutRegistry

REGISTERED_FONT_PREFIX = ple.config.REGISTERED_FONT_PREFIX
TEMPLATE_SUFFIX_PATTERNS = ple.config.TEMPLATE_SUFFIX_PATTERNS
PDF_TEMPLATE_EXTENSIONS = ple.config.PDF_TEMPLATE_EXTENSIONS

logger = logging.getLogger(__name__)


class FontUnavailableError(RuntimeError):
	"""Raised when neither a preferred nor the fallback font can be used."""


@dataclasses.dataclass(frozen=True)
class LabelFont:
	name: str
	source: str


class AssetCache:
	"""
	Process-wide cache of asset bytes and registered font names.

	Each key is filled at most once; concurrent callers asking for the same
	key wait on a per-key lock while the first one loads it.
	"""

	def __init__(self) -> None:
		self._lock = threading.Lock()
		self._fill_locks: dict[str, threading.Lock] = {}
		self._data: dict[str, bytes] = {}
		self._fonts: dict[str, str] = {}

	def _fill_once(self, table: dict, key: str, factory: Callable[[], object]):
		with self._lock:
			if key in table:
				return table[key]
			fill_lock = self._fill_locks.setdefault(f"{id(table)}:{key}", threading.Lock())
		with fill_lock:
			with self._lock:
				if key in table:
					return table[key]
			value = factory()
			with self._lock:
				table[key] = value
		return value

	def get_bytes(self, key: str, loader: Callable[[], bytes]) -> bytes:
		"""
		Return cached bytes for key, loading them on first use.

		Args:
			key: Resolved asset path.
			loader: Callable reading the bytes.

		Returns:
			Asset bytes.
		"""
		return self._fill_once(self._data, key, loader)

	def register_font(self, key: str, data: bytes) -> str:
		"""
		Register TrueType bytes with reportlab once per key.

		Args:
			key: Resolved font path.
			data: Font file bytes.

		Returns:
			Registered reportlab font name.
		"""
		def register() -> str:
			digest = hashlib.sha1(key.encode("utf-8")).hexdigest()[:10]
			font_name = f"{REGISTERED_FONT_PREFIX}-{digest}"
			font = reportlab.pdfbase.ttfonts.TTFont(font_name, io.BytesIO(data))
			reportlab.pdfbase.pdfmetrics.registerFont(font)
			logger.info("Registered label font %s from %s", font_name, key)
			return font_name
		return self._fill_once(self._fonts, key, register)

	def cached_keys(self) -> list[str]:
		with self._lock:
			return sorted(self._data)


class AssetStore:
	"""Reads assets by logical path relative to an asset root."""

	def __init__(self, root: pathlib.Path) -> None:
		self.root = pathlib.Path(root)

	def resolve(self, logical_path: str) -> pathlib.Path:
		path = pathlib.Path(logical_path)
		if path.is_absolute():
			return path
		return self.root / path

	def exists(self, logical_path: str) -> bool:
		return self.resolve(logical_path).is_file()

	def read(self, logical_path: str) -> bytes:
		return self.resolve(logical_path).read_bytes()


#============================================
def _font_is_usable(font_name: str) -> bool:
	"""
	Check whether reportlab can provide metrics for a font name.
	"""
	try:
		reportlab.pdfbase.pdfmetrics.getFont(font_name)
	except KeyError:
		return False
	return True


#============================================
def resolve_label_font(store: AssetStore, cache: AssetCache, config: EngineConfig) -> LabelFont:
	"""
	Pick the label font, preferring a TrueType file from the candidates.

	Args:
		store: Asset store used to resolve candidate paths.
		cache: Asset cache holding font bytes and registrations.
		config: Engine config with candidates and the fallback name.

	Returns:
		LabelFont to draw with.
	"""
	for candidate in config.font_candidates:
		if not candidate:
			continue
		path = store.resolve(candidate)
		if not path.is_file():
			continue
		key = str(path)
		try:
			data = cache.get_bytes(key, path.read_bytes)
			font_name = cache.register_font(key, data)
		except (OSError, reportlab.pdfbase.ttfonts.TTFError) as error:
			logger.warning("Font %s is unusable, trying the next candidate: %s", path, error)
			continue
		return LabelFont(name=font_name, source=key)
	fallback = config.fallback_font_name
	if not _font_is_usable(fallback):
		raise FontUnavailableError(f"No usable label font; fallback {fallback!r} is not available")
	if config.font_candidates:
		logger.warning("No preferred label font found, using built-in %s", fallback)
	return LabelFont(name=fallback, source="builtin")


#============================================
def build_template_candidates(
	registry: LayoutRegistry,
	product_name: str | None = None,
	override_path: str | None = None,
	role: str = "primary",
) -> list[str]:
	"""
	List template file names in lookup order.

	Args:
		registry: Buyer registry supplying tags and file names.
		product_name: Product name of the request.
		override_path: Explicit template path, tried first.
		role: "primary" or "detail".

	Returns:
		Ordered, de-duplicated candidate list.
	"""
	candidates: list[str] = []
	if role == "detail":
		candidates.extend(registry.detail_template_names)
	else:
		if override_path:
			candidates.append(override_path)
		product_key = ple.normalize.normalize_product_key(product_name)
		special = registry.special_template_for(product_key)
		if special:
			candidates.append(special)
		if product_key and registry.template_tag:
			for pattern in TEMPLATE_SUFFIX_PATTERNS:
				candidates.append(product_key + pattern.format(tag=registry.template_tag))
		candidates.extend(registry.default_template_names)
	unique: list[str] = []
	for candidate in candidates:
		if candidate not in unique:
			unique.append(candidate)
	return unique


#============================================
def read_template_geometry(data: bytes, path: str) -> tuple[str, float, float]:
	"""
	Read the kind and first page size of a template.

	Args:
		data: Template bytes.
		path: Template path, used for the kind.

	Returns:
		(kind, width, height) with sizes in points.
	"""
	if pathlib.Path(path).suffix.lower() in PDF_TEMPLATE_EXTENSIONS:
		reader = pypdf.PdfReader(io.BytesIO(data))
		if not reader.pages:
			raise ValueError(f"Template has no pages: {path}")
		box = reader.pages[0].mediabox
		return "pdf", float(box.width), float(box.height)
	with PIL.Image.open(io.BytesIO(data)) as image:
		width, height = image.size
	return "image", float(width), float(height)


#============================================
def resolve_template(
	store: AssetStore,
	cache: AssetCache,
	registry: LayoutRegistry,
	product_name: str | None = None,
	override_path: str | None = None,
	role: str = "primary",
) -> TemplateDescriptor | None:
	"""
	Resolve the first existing, readable template candidate.

	Args:
		store: Asset store.
		cache: Asset cache for template bytes.
		registry: Buyer registry.
		product_name: Product name of the request.
		override_path: Explicit template path.
		role: "primary" or "detail".

	Returns:
		TemplateDescriptor, or None when no candidate can be used.
	"""
	for candidate in build_template_candidates(registry, product_name, override_path, role):
		if not store.exists(candidate):
			continue
		path = store.resolve(candidate)
		key = str(path)
		try:
			data = cache.get_bytes(key, path.read_bytes)
			kind, width, height = read_template_geometry(data, key)
			descriptor = TemplateDescriptor(data=data, kind=kind, width=width, height=height, path=key)
		except (pypdf.errors.PyPdfError, OSError, ValueError) as error:
			logger.warning("Skipping unreadable template %s: %s", path, error)
			continue
		logger.info("Resolved %s template %s (%.1fx%.1f)", role, path, width, height)
		return descriptor
	logger.info("No %s template found for buyer %s", role, registry.buyer.value)
	return None
