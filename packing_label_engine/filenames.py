"""
Deterministic output file names.
"""

# Standard Library
import re

# local repo modules
import packing_label_engine as ple
import packing_label_engine.config


FILE_NAME_MARKER = ple.config.FILE_NAME_MARKER
FILE_NAME_TERMINAL = ple.config.FILE_NAME_TERMINAL


#============================================
def sanitize_token(value: str) -> str:
	"""
	Sanitize a string for use inside a file name.

	Args:
		value: Input string.

	Returns:
		Token with runs of characters outside word, dot and hyphen
		turned into single hyphens.
	"""
	token = re.sub(r"[^\w.-]+", "-", value.strip())
	token = re.sub(r"-{2,}", "-", token)
	return token.strip("-")


#============================================
def build_label_file_name(
	source_name: str,
	variant_suffix: str | None = None,
	lot: str | None = None,
) -> str:
	"""
	Build the name of one output document.

	Args:
		source_name: Name of the originating order file.
		variant_suffix: Suffix distinguishing sibling documents.
		lot: Lot value, preferred over the source name when present.

	Returns:
		File name such as pedido-manual-AB12345-etiqueta.pdf.
	"""
	base = ""
	if lot:
		base = sanitize_token(lot)
	if not base:
		stem = re.sub(r"\.[^/.]+$", "", source_name.strip())
		base = sanitize_token(stem) or "pedido"
	if base.startswith(FILE_NAME_MARKER):
		base = base[len(FILE_NAME_MARKER):] or "pedido"
	suffix = ""
	if variant_suffix:
		token = sanitize_token(variant_suffix)
		if token:
			suffix = f"-{token}"
	return f"{FILE_NAME_MARKER}{base}{suffix}{FILE_NAME_TERMINAL}"
