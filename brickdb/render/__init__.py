"""brickdb rendering helpers."""
from brickdb.render.html import linearize_attributes, records_to_html

__all__ = ["linearize_attributes", "records_to_html"]
