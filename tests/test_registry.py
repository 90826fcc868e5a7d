import random

import pytest

import packing_label_engine as ple
import packing_label_engine.buyers
import packing_label_engine.config
import packing_label_engine.normalize
import packing_label_engine.registry


Buyer = ple.registry.Buyer


#============================================
@pytest.mark.parametrize(
	"tag, expected",
	[
		("", Buyer.MERCADONA),
		(None, Buyer.MERCADONA),
		("Lidl Canarias", Buyer.LIDL),
		("ALDI", Buyer.ALDI),
		("Hiperdino", Buyer.HIPERDINO),
		("kanali", Buyer.KANALI),
		("Blanca Grande", Buyer.WHITE_LARGE),
		("blanca-pequeña", Buyer.WHITE_SMALL),
		(Buyer.LIDL, Buyer.LIDL),
	],
)
def test_parse_buyer(tag, expected) -> None:
	"""
	Buyer tags are matched leniently.
	"""
	assert ple.registry.parse_buyer(tag) is expected


#============================================
def test_parse_buyer_unknown_raises() -> None:
	"""
	Unrecognised tags are a caller error.
	"""
	with pytest.raises(ple.registry.UnknownBuyerError):
		ple.registry.parse_buyer("carrefour")


#============================================
def test_template_family_offsets() -> None:
	"""
	Buyer offsets are added in grid units before the transform.
	"""
	registry = ple.buyers.MercadonaRegistry()
	entry = registry.resolve_entry("packing_date", "albahaca", "primary")
	assert (entry.x, entry.y) == (343.0, 407.0)
	r_code = registry.resolve_entry("r_code", "", "primary")
	assert (r_code.x, r_code.y) == (1005.0, 435.0)
	assert registry.resolve_entry("coc_code", "", "primary") is None


#============================================
def test_hiperdino_hides_r_code() -> None:
	registry = ple.buyers.HiperdinoRegistry()
	assert registry.resolve_entry("r_code", "", "primary") is None
	assert registry.resolve_entry("lot", "", "primary") is not None


#============================================
def test_lidl_product_rules() -> None:
	"""
	Product rules beat buyer rules; lot-only products hide the date.
	"""
	registry = ple.buyers.LidlRegistry()
	generic = registry.resolve_entry("lot", "espinaca", "primary")
	assert (generic.x, generic.y) == (956.5, 389.0)
	eneldo = registry.resolve_entry("lot", "eneldo", "primary")
	assert (eneldo.x, eneldo.y) == (896.5, 409.0)
	assert registry.resolve_entry("packing_date", "eneldo", "primary") is None
	assert registry.resolve_entry("weight", "cilantrofresco", "primary") is None
	weight = registry.resolve_entry("weight", "romero", "primary")
	assert weight.font_size == 90.0
	albahaca_date = registry.resolve_entry("packing_date", "albahaca", "primary")
	assert albahaca_date.align == "right"


#============================================
def test_suppression_beats_positional_override() -> None:
	"""
	A suppress rule wins over an offset rule of the same specificity.
	"""

	class ConflictRegistry(ple.buyers.MercadonaRegistry):
		def override_rules(self):
			return super().override_rules() + (
				ple.buyers.offset_rule(self.buyer, "lot", (5.0, 5.0), "perejil"),
				ple.buyers.suppress_rule(self.buyer, "lot", "perejil"),
			)

	registry = ConflictRegistry()
	assert registry.resolve_entry("lot", "perejil", "primary") is None
	assert registry.resolve_entry("lot", "romero", "primary") is not None
	keys = [entry.field_key for entry in registry.resolve_layout("perejil", "primary")]
	assert "lot" not in keys


#============================================
def test_aldi_special_products_use_mm_layout() -> None:
	"""
	Herb products switch to millimetre entries and drop the text block.
	"""
	registry = ple.buyers.AldiRegistry()
	entries = {entry.field_key: entry for entry in registry.resolve_layout("hojasfrescasacelga", "primary")}
	assert set(entries) == {"lot", "trace_code", "weight"}
	assert entries["lot"].units == "mm"
	assert entries["weight"].nudge_y == pytest.approx(3.6)
	assert registry.special_template_for("hierbabuena") == "hierbahuertoaldi.pdf"
	assert registry.extra_draws("hojasfrescasacelga", "primary") == ()

	generic = {entry.field_key for entry in registry.resolve_layout("tomillo", "primary")}
	assert "product" in generic
	assert "aldi_line_8" in generic
	assert len(registry.extra_draws("tomillo", "primary")) == 1


#============================================
def test_kanali_unknown_product_has_no_layout() -> None:
	"""
	Kanali only lays out its produce templates.
	"""
	registry = ple.buyers.KanaliRegistry()
	assert registry.resolve_layout("lechuga", "primary") == []
	entries = registry.resolve_layout("cilantrofresco", "primary")
	assert {entry.field_key for entry in entries} == {"lot", "packing_date", "weight"}
	assert all(entry.font_size == 6.5 for entry in entries)
	assert all(entry.units == "mm" for entry in entries)


#============================================
@pytest.mark.parametrize(
	"product, weight, expected",
	[
		("Cilantro Fresco", None, "50gr"),
		("Cilantro Fresco", "40gr", "50gr"),
		("Cilantro Fresco", "40 GR", "50gr"),
		("Cilantro Fresco", "75gr", "75gr"),
		("Romero", None, "40gr"),
		("Romero", "40gr", "40gr"),
	],
)
def test_kanali_cilantro_weight(product: str, weight: str | None, expected: str) -> None:
	"""
	Cilantro prints 50gr unless the order names a weight other than 40gr.
	"""
	fields = ple.config.LabelFields(product_name=product, weight=weight, buyer="kanali")
	normalized = ple.normalize.normalize_fields(fields, random.Random(3))
	assert ple.buyers.KanaliRegistry().weight_for(normalized) == expected


#============================================
def test_document_variants() -> None:
	"""
	Only Lidl and Aldi fan out to three documents.
	"""
	registries = ple.buyers.build_registries()
	for buyer, registry in registries.items():
		count = len(registry.document_variants())
		if buyer in (Buyer.LIDL, Buyer.ALDI):
			assert count == 3
		else:
			assert count == 1
