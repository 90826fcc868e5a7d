"""
CLI entry point for rendering packing labels.
"""

# Standard Library
import argparse
import logging
import pathlib
import random
import time

# local repo modules
import packing_label_engine as ple
import packing_label_engine.assembler
import packing_label_engine.config


EngineConfig = ple.config.EngineConfig
LabelFields = ple.config.LabelFields

DEFAULT_FONT_CANDIDATES = ple.config.DEFAULT_FONT_CANDIDATES


#============================================
def build_engine_config(args: argparse.Namespace) -> EngineConfig:
	"""
	Build engine config from CLI args on top of the environment.

	Args:
		args: Parsed argparse namespace.

	Returns:
		EngineConfig.
	"""
	config = ple.config.load_engine_config()
	if args.asset_root:
		config.asset_root = pathlib.Path(args.asset_root)
	if args.font_path:
		config.font_candidates = (args.font_path,) + DEFAULT_FONT_CANDIDATES
	if args.template_path:
		config.template_override = args.template_path
	return config


#============================================
def build_label_fields(args: argparse.Namespace) -> LabelFields:
	"""
	Collect label fields from CLI args.

	Args:
		args: Parsed argparse namespace.

	Returns:
		LabelFields.
	"""
	return LabelFields(
		packing_date=args.packing_date,
		lot=args.lot,
		label_code=args.label_code,
		coc_code=args.coc_code,
		r_code=args.r_code,
		weight=args.weight,
		product_name=args.product_name,
		variety=args.variety,
		category=args.category,
		box_weight=args.box_weight,
		buyer=args.buyer,
	)


#============================================
def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
	"""
	Parse command line arguments.

	Returns:
		Parsed argparse namespace.
	"""
	parser = argparse.ArgumentParser(description="Render packing label PDFs for one order.")
	parser.add_argument("file_name", help="Name of the originating order file.")

	fields_group = parser.add_argument_group("Fields")
	fields_group.add_argument("-b", "--buyer", dest="buyer", default="", help="Buyer tag, e.g. lidl or blanca-grande.")
	fields_group.add_argument("-p", "--product", dest="product_name", default=None, help="Product name.")
	fields_group.add_argument("-d", "--date", dest="packing_date", default=None, help="Packing date, ISO or DD/MM/YY.")
	fields_group.add_argument("-l", "--lot", dest="lot", default=None, help="Lot code.")
	fields_group.add_argument("-w", "--weight", dest="weight", default=None, help="Net weight text.")
	fields_group.add_argument("-W", "--box-weight", dest="box_weight", default=None, help="Box weight text.")
	fields_group.add_argument("-e", "--ean", dest="label_code", default=None, help="EAN-13 label code.")
	fields_group.add_argument("--coc", dest="coc_code", default=None, help="CoC traceability code.")
	fields_group.add_argument("--r-code", dest="r_code", default=None, help="R traceability code.")
	fields_group.add_argument("--variety", dest="variety", default=None, help="Variety.")
	fields_group.add_argument("--category", dest="category", default=None, help="Category.")

	assets_group = parser.add_argument_group("Assets")
	assets_group.add_argument("-a", "--asset-root", dest="asset_root", default=None, help="Template and font directory.")
	assets_group.add_argument("-t", "--template", dest="template_path", default=None, help="Explicit primary template.")
	assets_group.add_argument("-f", "--font", dest="font_path", default=None, help="Preferred TrueType font.")

	output_group = parser.add_argument_group("Output")
	output_group.add_argument("-o", "--output-dir", dest="output_dir", default=".", help="Directory for written PDFs.")
	output_group.add_argument("-s", "--seed", dest="seed", type=int, default=None, help="Seed for generated lots.")
	output_group.add_argument("-v", "--verbose", dest="verbose", action="store_true", help="Show engine log messages.")

	args = parser.parse_args(argv)
	return args


#============================================
def run_render(args: argparse.Namespace) -> list[pathlib.Path]:
	"""
	Render one request and write every document.

	Args:
		args: Parsed argparse namespace.

	Returns:
		Paths of the written documents.
	"""
	config = build_engine_config(args)
	fields = build_label_fields(args)
	print(f"Order: {args.file_name}")
	print(f"Buyer: {fields.buyer or 'mercadona'}")
	print(f"Asset root: {config.asset_root}")

	rng = random.Random(args.seed)
	assembler = ple.assembler.LabelAssembler(config, rng=rng)
	start_time = time.perf_counter()
	results = assembler.render(fields, args.file_name)
	render_time = time.perf_counter() - start_time

	output_dir = pathlib.Path(args.output_dir)
	output_dir.mkdir(parents=True, exist_ok=True)
	written: list[pathlib.Path] = []
	for result in results:
		path = output_dir / result.file_name
		path.write_bytes(result.data)
		written.append(path)
		print(f"Wrote: {path}")
	print(f"Documents written: {len(written)}")
	print(f"Timing: render={render_time:.2f}s")
	return written


#============================================
def main(argv: list[str] | None = None) -> None:
	"""
	Main entry point.
	"""
	args = parse_args(argv)
	level = logging.INFO if args.verbose else logging.WARNING
	logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")
	run_render(args)
