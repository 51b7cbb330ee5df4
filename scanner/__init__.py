"""
Document Scanner

This package contains the client-side document analysis pipeline:
- Grayscale, blur, Sobel and threshold filters
- Contour extraction and Douglas-Peucker polygon approximation
- Document quadrilateral classification
- Image quality analysis (blur, low light)
- Overlay rendering and the throttled detection loop
"""

__version__ = "1.0.0"
