"""
Pytest configuration for local imports and generated label assets.
"""

# Standard Library
import os
import pathlib
import random
import sys

# PIP3 modules
import PIL.Image
import pytest
import reportlab.pdfgen.canvas

#============================================


def _ensure_repo_on_path() -> None:
	"""
	Ensure the repository root is on sys.path.
	"""
	repo_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
	if repo_root not in sys.path:
		sys.path.insert(0, repo_root)


_ensure_repo_on_path()

# local repo modules
import packing_label_engine as ple  # noqa: E402
import packing_label_engine.assembler  # noqa: E402
import packing_label_engine.config  # noqa: E402


#============================================
def write_pdf_template(path: pathlib.Path, width: float = 190.0, height: float = 116.0) -> pathlib.Path:
	"""
	Write a one page vector template with a thin border.

	Args:
		path: Output path.
		width: Page width in points.
		height: Page height in points.

	Returns:
		The written path.
	"""
	path.parent.mkdir(parents=True, exist_ok=True)
	pdf = reportlab.pdfgen.canvas.Canvas(str(path), pagesize=(width, height))
	pdf.setLineWidth(0.5)
	pdf.rect(2, 2, width - 4, height - 4, stroke=1, fill=0)
	pdf.showPage()
	pdf.save()
	return path


#============================================
def write_png_template(path: pathlib.Path, width: int = 300, height: int = 180) -> pathlib.Path:
	"""
	Write a plain white raster template.
	"""
	path.parent.mkdir(parents=True, exist_ok=True)
	image = PIL.Image.new("RGB", (width, height), (255, 255, 255))
	image.save(path, format="PNG")
	return path


#============================================
@pytest.fixture
def asset_root(tmp_path: pathlib.Path) -> pathlib.Path:
	root = tmp_path / "assets"
	root.mkdir()
	return root


#============================================
@pytest.fixture
def engine_config(asset_root: pathlib.Path) -> ple.config.EngineConfig:
	"""
	Engine config without system fonts, so output does not depend on the host.
	"""
	return ple.config.EngineConfig(asset_root=asset_root, font_candidates=())


#============================================
@pytest.fixture
def assembler(engine_config: ple.config.EngineConfig) -> ple.assembler.LabelAssembler:
	return ple.assembler.LabelAssembler(engine_config, rng=random.Random(7))
