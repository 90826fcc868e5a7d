import io
import random

import pypdf
import pytest

import conftest
import packing_label_engine as ple
import packing_label_engine.assembler
import packing_label_engine.assets
import packing_label_engine.config
import packing_label_engine.registry


LabelFields = ple.config.LabelFields
AssemblyState = ple.assembler.AssemblyState


#============================================
def _page_text(data: bytes) -> str:
	"""
	Extract the text of the single page of a rendered document.
	"""
	reader = pypdf.PdfReader(io.BytesIO(data))
	assert len(reader.pages) == 1
	return reader.pages[0].extract_text()


#============================================
def _page_size(data: bytes) -> tuple[float, float]:
	box = pypdf.PdfReader(io.BytesIO(data)).pages[0].mediabox
	return float(box.width), float(box.height)


#============================================
def test_missing_template_yields_text_document(assembler) -> None:
	"""
	A buyer without any template asset still gets one valid PDF.
	"""
	fields = LabelFields(product_name="Perejil", lot="AB12345", packing_date="2024-05-06")
	results = assembler.render(fields, "order.pdf")
	assert len(results) == 1
	result = results[0]
	assert result.mime_type == "application/pdf"
	assert result.data.startswith(b"%PDF")
	assert result.file_name == "pedido-manual-AB12345-mercadona-fallback-etiqueta.pdf"
	text = _page_text(result.data)
	assert "PEREJIL" in text
	assert "AB12345" in text


#============================================
def test_mercadona_draws_on_vector_template(assembler, asset_root) -> None:
	"""
	Template fields land on the merged template page.
	"""
	conftest.write_pdf_template(asset_root / "Etiqueta.pdf", 190.0, 116.0)
	fields = LabelFields(product_name="Perejil", lot="AB12345", packing_date="2024-05-06", coc_code="999")
	results = assembler.render(fields, "order.pdf")
	assert len(results) == 1
	assert results[0].file_name == "pedido-manual-AB12345-etiqueta.pdf"
	assert _page_size(results[0].data) == pytest.approx((190.0, 116.0))
	text = _page_text(results[0].data)
	assert "06.05.24" in text
	assert "AB12345" in text
	assert "40gr" in text
	assert "10" in text
	# coc is suppressed for every template buyer
	assert "999" not in text


#============================================
def test_raster_template_sets_page_size(assembler, asset_root) -> None:
	"""
	Image templates fill a page of their pixel size.
	"""
	conftest.write_png_template(asset_root / "Etiqueta.png", 300, 180)
	fields = LabelFields(product_name="Romero", lot="CD54321", packing_date="2024-05-06")
	results = assembler.render(fields, "order.pdf")
	assert _page_size(results[0].data) == pytest.approx((300.0, 180.0))
	assert "CD54321" in _page_text(results[0].data)


#============================================
@pytest.mark.parametrize("buyer", ["lidl", "aldi"])
def test_lidl_and_aldi_fan_out(assembler, buyer: str) -> None:
	"""
	Lidl and Aldi requests produce three documents with distinct names.
	"""
	fields = LabelFields(product_name="Tomillo", lot="AB12345", weight="100g", buyer=buyer)
	results = assembler.render(fields, "order.pdf")
	assert len(results) == 3
	names = [result.file_name for result in results]
	assert len(set(names)) == 3
	assert names[1] == f"pedido-manual-AB12345-{buyer}-10x5-peso-etiqueta.pdf"
	assert names[2] == f"pedido-manual-AB12345-{buyer}-10x5-detalle-etiqueta.pdf"
	for result in results:
		assert result.data.startswith(b"%PDF")


#============================================
@pytest.mark.parametrize("buyer", ["mercadona", "hiperdino", "kanali", "blanca-grande", "blanca-pequena"])
def test_other_buyers_single_document(assembler, buyer: str) -> None:
	fields = LabelFields(product_name="Cilantro", lot="AB12345", buyer=buyer)
	assert len(assembler.render(fields, "order.pdf")) == 1


#============================================
def test_compact_label_text(assembler) -> None:
	"""
	The compact label carries the product and weight on a 720x360 page.
	"""
	fields = LabelFields(product_name="Albahaca", lot="AB12345", buyer="Lidl Canarias")
	results = assembler.render(fields, "order.pdf")
	compact = results[1]
	assert _page_size(compact.data) == pytest.approx((720.0, 360.0))
	assert "ALBAHACA 60gr" in _page_text(compact.data)


#============================================
def test_detail_grid_when_template_missing(assembler) -> None:
	"""
	Without a detail template the bordered box grid is drawn.
	"""
	fields = LabelFields(product_name="Eneldo", lot="AB12345", packing_date="2024-05-06", buyer="aldi")
	detail = assembler.render(fields, "order.pdf")[2]
	text = _page_text(detail.data)
	assert "AGENCIA" in text
	assert "Marca: Aldi" in text
	assert "06/05/2024" in text
	assert "35010" in text


#============================================
def test_detail_grid_when_template_corrupt(assembler, asset_root) -> None:
	"""
	A broken detail template degrades to the box grid.
	"""
	(asset_root / "Etiqueta-Lidl-Caja.pdf").write_bytes(b"%PDF-1.4 broken")
	fields = LabelFields(product_name="Eneldo", lot="AB12345", buyer="lidl")
	detail = assembler.render(fields, "order.pdf")[2]
	assert "AGENCIA" in _page_text(detail.data)


#============================================
def test_detail_template_used_when_present(assembler, asset_root) -> None:
	"""
	A readable detail template gets the millimetre detail layout.
	"""
	conftest.write_pdf_template(asset_root / "Etiqueta-Lidl-Caja.pdf", 283.0, 142.0)
	fields = LabelFields(product_name="Eneldo", lot="AB12345", buyer="lidl", label_code="400638133393")
	detail = assembler.render(fields, "order.pdf")[2]
	assert _page_size(detail.data) == pytest.approx((283.0, 142.0))
	text = _page_text(detail.data)
	assert "ENELDO" in text
	assert "4006381333931" in text
	assert "AGENCIA" not in text


#============================================
def test_lidl_lot_only_product_hides_date(assembler, asset_root) -> None:
	"""
	Suppressed fields never reach the page.
	"""
	conftest.write_pdf_template(asset_root / "Etiqueta.pdf", 190.0, 116.0)
	fields = LabelFields(product_name="Eneldo", lot="AB12345", packing_date="2024-05-06", buyer="lidl")
	primary = assembler.render(fields, "order.pdf")[0]
	text = _page_text(primary.data)
	assert "AB12345" in text
	assert "30g" in text
	assert "06.05.24" not in text


#============================================
def test_aldi_generic_template_with_barcode(assembler, asset_root) -> None:
	"""
	The Aldi text block and barcode digits are drawn on the generic template.
	"""
	conftest.write_pdf_template(asset_root / "Etiqueta-Aldi.pdf", 631.0, 384.0)
	fields = LabelFields(
		product_name="Tomillo",
		lot="5/7",
		r_code="R-12",
		label_code="4006381333931",
		buyer="aldi",
	)
	primary = assembler.render(fields, "order.pdf")[0]
	assert primary.file_name == "pedido-manual-5-7-etiqueta.pdf"
	text = _page_text(primary.data)
	assert "TOMILLO" in text
	assert "LOTE ALDI: 05/07" in text
	assert "E00012" in text
	assert "4006381333931" in text


#============================================
def test_kanali_unknown_product_falls_back(assembler, asset_root) -> None:
	"""
	Kanali products without a layout render the text document.
	"""
	conftest.write_pdf_template(asset_root / "Etiqueta-Kanali.pdf")
	fields = LabelFields(product_name="Lechuga", packing_date="2024-05-06", buyer="kanali")
	results = assembler.render(fields, "order.pdf")
	assert results[0].file_name.endswith("-kanali-fallback-etiqueta.pdf")
	assert "LOTE KANALI: 19/06" in _page_text(results[0].data)


#============================================
def test_kanali_packing_date_beats_slash_lot(assembler) -> None:
	"""
	The week/day lot follows the packing date, not a slash lot.
	"""
	fields = LabelFields(product_name="Lechuga", lot="3/5", packing_date="2024-03-15", buyer="kanali")
	run = assembler.render_run(fields, "order.pdf")
	assert run.normalized.week_day_lot == "11/15"
	assert "LOTE KANALI: 11/15" in _page_text(run.results[0].data)


#============================================
def test_white_label_small(assembler) -> None:
	"""
	White labels are drawn on a blank page of their configured size.
	"""
	fields = LabelFields(product_name="Perejil", variety="Rizado", packing_date="2024-05-06", buyer="blanca-pequena")
	result = assembler.render(fields, "order.pdf")[0]
	assert _page_size(result.data) == pytest.approx((480.0, 260.0))
	text = _page_text(result.data)
	assert "PEREJIL" in text
	assert "Variedad: RIZADO" in text


#============================================
def test_state_history(assembler) -> None:
	"""
	Templates resolve once, then each variant walks the drawing states.
	"""
	fields = LabelFields(product_name="Eneldo", lot="AB12345", buyer="lidl")
	run = assembler.render_run(fields, "order.pdf")
	per_variant = [
		AssemblyState.NORMALIZING_FIELDS,
		AssemblyState.RESOLVING_LAYOUT,
		AssemblyState.DRAWING,
	]
	expected = [AssemblyState.RESOLVING_TEMPLATE] + per_variant * 3 + [AssemblyState.DONE]
	assert run.history == expected
	assert run.state is AssemblyState.DONE
	assert len(run.results) == 3


#============================================
def test_generated_lot_shared_by_documents(engine_config) -> None:
	"""
	A generated lot is resolved once and reused by every document.
	"""
	assembler = ple.assembler.LabelAssembler(engine_config, rng=random.Random(11))
	fields = LabelFields(product_name="Eneldo", buyer="lidl")
	run = assembler.render_run(fields, "pedido-55.pdf")
	lot = run.normalized.lot
	assert lot.startswith("PE")
	assert lot in _page_text(run.results[2].data)


#============================================
def test_unknown_buyer_raises(assembler) -> None:
	with pytest.raises(ple.registry.UnknownBuyerError):
		assembler.render(LabelFields(buyer="carrefour"), "order.pdf")


#============================================
def test_font_unavailable_raises(asset_root) -> None:
	"""
	Font failure is the one fatal rendering error.
	"""
	config = ple.config.EngineConfig(asset_root=asset_root, font_candidates=(), fallback_font_name="NoSuchFont")
	assembler = ple.assembler.LabelAssembler(config)
	with pytest.raises(ple.assets.FontUnavailableError):
		assembler.render(LabelFields(product_name="Perejil"), "order.pdf")
