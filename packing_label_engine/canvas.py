"""
Page canvas over reportlab, with template underlays.
"""

# Standard Library
import io

# PIP3 modules
import PIL.Image
import pypdf
import reportlab.lib.utils
import reportlab.pdfbase.pdfmetrics
import reportlab.pdfgen.canvas

# local repo modules
import packing_label_engine as ple
import packing_label_engine.assets
import packing_label_engine.config


TemplateDescriptor = ple.config.TemplateDescriptor
LabelFont = ple.assets.LabelFont


class PageCanvas:
	"""
	One label page.

	Raster templates are drawn first, as the page background. Vector
	templates are merged under the finished drawing with pypdf.
	"""

	def __init__(self, template: TemplateDescriptor, font: LabelFont) -> None:
		self.template = template
		self.font = font
		self.width = template.width
		self.height = template.height
		self._buffer = io.BytesIO()
		self._pdf = reportlab.pdfgen.canvas.Canvas(self._buffer, pagesize=(self.width, self.height))
		self._pdf.setFillColorRGB(0.0, 0.0, 0.0)
		self._pdf.setStrokeColorRGB(0.0, 0.0, 0.0)
		if template.kind == "image":
			self.draw_image(template.data, 0.0, 0.0, self.width, self.height)

	def text_width(self, text: str, font_size: float) -> float:
		return reportlab.pdfbase.pdfmetrics.stringWidth(text, self.font.name, font_size)

	def draw_text(self, text: str, x: float, y: float, font_size: float) -> None:
		self._pdf.setFont(self.font.name, font_size)
		self._pdf.drawString(x, y, text)

	def draw_rect(
		self,
		x: float,
		y: float,
		width: float,
		height: float,
		stroke: bool = True,
		fill: bool = False,
		line_width: float = 1.0,
	) -> None:
		self._pdf.setLineWidth(line_width)
		self._pdf.rect(x, y, width, height, stroke=int(stroke), fill=int(fill))

	def draw_line(self, x0: float, y0: float, x1: float, y1: float, thickness: float = 1.0) -> None:
		self._pdf.setLineWidth(thickness)
		self._pdf.line(x0, y0, x1, y1)

	def draw_image(self, data: bytes, x: float, y: float, width: float, height: float) -> None:
		"""
		Draw raster bytes stretched to the given box.

		Args:
			data: Encoded image bytes.
			x: Left edge in points.
			y: Bottom edge in points.
			width: Box width in points.
			height: Box height in points.
		"""
		with PIL.Image.open(io.BytesIO(data)) as image:
			image.load()
			image_reader = reportlab.lib.utils.ImageReader(image.copy())
		self._pdf.drawImage(
			image_reader,
			x,
			y,
			width=width,
			height=height,
			mask=None,
			preserveAspectRatio=False,
			anchor="sw",
		)

	def finish(self) -> bytes:
		"""
		Close the page and return the document bytes.

		Returns:
			PDF bytes with any vector template merged underneath.
		"""
		self._pdf.showPage()
		self._pdf.save()
		overlay_bytes = self._buffer.getvalue()
		if self.template.kind != "pdf":
			return overlay_bytes
		template_page = pypdf.PdfReader(io.BytesIO(self.template.data)).pages[0]
		overlay_page = pypdf.PdfReader(io.BytesIO(overlay_bytes)).pages[0]
		template_page.merge_page(overlay_page)
		writer = pypdf.PdfWriter()
		writer.add_page(template_page)
		output = io.BytesIO()
		writer.write(output)
		return output.getvalue()
