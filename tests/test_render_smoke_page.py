import fitz
import PIL.Image
import pytest

import conftest
import packing_label_engine as ple
import packing_label_engine.config


DPI = 150
INK_THRESHOLD = 240
EDGE_RATIO_LIMIT = 0.01


#============================================
def _render_pdf_first_page(data: bytes) -> PIL.Image.Image:
	"""
	Render the first page of a PDF document to an image.

	Args:
		data: PDF bytes.

	Returns:
		PIL image.
	"""
	document = fitz.open(stream=data, filetype="pdf")
	page = document[0]
	scale = DPI / 72.0
	matrix = fitz.Matrix(scale, scale)
	pixmap = page.get_pixmap(matrix=matrix, alpha=False)
	image = PIL.Image.frombytes("RGB", [pixmap.width, pixmap.height], pixmap.samples)
	document.close()
	return image


#============================================
def _count_ink_ratio(gray: PIL.Image.Image, threshold: int) -> float:
	"""
	Compute the ink ratio for a grayscale region.

	Args:
		gray: Grayscale image region.
		threshold: Pixel intensity threshold.

	Returns:
		Ink ratio.
	"""
	pixels = list(gray.getdata())
	if not pixels:
		return 0.0
	ink = sum(1 for value in pixels if value < threshold)
	return ink / len(pixels)


#============================================
def _edge_violations(gray: PIL.Image.Image) -> list[str]:
	"""
	List page edges whose outer strip carries ink.
	"""
	width, height = gray.size
	strip = max(2, int(round(DPI / 72.0 * 4)))
	edges = (
		("left", gray.crop((0, 0, strip, height))),
		("right", gray.crop((width - strip, 0, width, height))),
		("top", gray.crop((0, 0, width, strip))),
		("bottom", gray.crop((0, height - strip, width, height))),
	)
	violations = []
	for edge_name, edge in edges:
		ratio = _count_ink_ratio(edge, INK_THRESHOLD)
		if ratio > EDGE_RATIO_LIMIT:
			violations.append(f"edge {edge_name} ratio {ratio:.3f}")
	return violations


#============================================
@pytest.mark.parametrize("index", [1, 2])
def test_blank_canvas_documents_stay_inside_margins(assembler, index: int) -> None:
	"""
	Compact and box-grid labels have ink in the middle and clean edges.
	"""
	fields = ple.config.LabelFields(
		product_name="Hierba Huerto Fresca",
		lot="AB12345",
		packing_date="2024-05-06",
		weight="40g",
		buyer="lidl",
	)
	result = assembler.render(fields, "order.pdf")[index]
	gray = _render_pdf_first_page(result.data).convert("L")
	assert _count_ink_ratio(gray, INK_THRESHOLD) > 0.005
	violations = _edge_violations(gray)
	if violations:
		raise AssertionError("Edge strip ink detected:\n" + "\n".join(violations))


#============================================
def test_aldi_barcode_has_ink(assembler, asset_root) -> None:
	"""
	The Aldi barcode box is filled with bars when the code is valid.
	"""
	conftest.write_pdf_template(asset_root / "Etiqueta-Aldi.pdf", 631.0, 384.0)
	fields = ple.config.LabelFields(product_name="Tomillo", lot="AB12345", label_code="400638133393", buyer="aldi")
	result = assembler.render(fields, "order.pdf")[0]
	gray = _render_pdf_first_page(result.data).convert("L")
	scale = DPI / 72.0
	# grid box x 656..1085, y 620..696.8 on a page at half the grid size
	box = (
		int(round(328.0 * scale)),
		int(round(310.0 * scale)),
		int(round(542.5 * scale)),
		int(round(348.4 * scale)),
	)
	ratio = _count_ink_ratio(gray.crop(box), INK_THRESHOLD)
	assert ratio > 0.2

	without_code = ple.config.LabelFields(product_name="Tomillo", lot="AB12345", buyer="aldi")
	result = assembler.render(without_code, "order.pdf")[0]
	gray = _render_pdf_first_page(result.data).convert("L")
	assert _count_ink_ratio(gray.crop(box), INK_THRESHOLD) < 0.01
