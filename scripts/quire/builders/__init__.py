from quire.builders.epub import EpubBuilder
from quire.builders.html import HtmlBuilder
from quire.builders.pdf import PdfBuilder, SampleBuilder

BUILDERS = {
    "pdf": PdfBuilder,
    "epub": EpubBuilder,
    "html": HtmlBuilder,
    "sample": SampleBuilder,
}
