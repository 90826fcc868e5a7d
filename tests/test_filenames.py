import pytest

import packing_label_engine as ple
import packing_label_engine.filenames


#============================================
def test_plain_name() -> None:
	"""
	The order name gets the marker prefix and terminal suffix.
	"""
	assert ple.filenames.build_label_file_name("order 12.pdf") == "pedido-manual-order-12-etiqueta.pdf"


#============================================
def test_marker_not_repeated() -> None:
	"""
	Names that already carry the marker keep a single copy of it.
	"""
	name = ple.filenames.build_label_file_name("pedido-manual-77.pdf")
	assert name == "pedido-manual-77-etiqueta.pdf"


#============================================
def test_lot_preferred_and_suffix() -> None:
	"""
	A lot replaces the order name and slashes become hyphens.
	"""
	name = ple.filenames.build_label_file_name("order.pdf", "lidl-10x5-peso", lot="19/06")
	assert name == "pedido-manual-19-06-lidl-10x5-peso-etiqueta.pdf"


#============================================
def test_whitespace_collapses() -> None:
	"""
	Runs of whitespace and hyphens collapse to one hyphen.
	"""
	name = ple.filenames.build_label_file_name("  big   order -- 3 ")
	assert name == "pedido-manual-big-order-3-etiqueta.pdf"


#============================================
@pytest.mark.parametrize("source", ["pedido 42.jpg", "pedido 42.PNG", "pedido 42.pdf", "pedido 42"])
def test_any_extension_stripped(source: str) -> None:
	"""
	Scanned and photographed orders lose their extension too.
	"""
	assert ple.filenames.build_label_file_name(source) == "pedido-manual-pedido-42-etiqueta.pdf"


#============================================
def test_path_hostile_characters_replaced() -> None:
	name = ple.filenames.build_label_file_name("order.pdf", lot='AB:12*3?4"5')
	assert name == "pedido-manual-AB-12-3-4-5-etiqueta.pdf"
	assert ple.filenames.sanitize_token("a\\b/c<d>e|f") == "a-b-c-d-e-f"
