from rosvizkit import messages
from rosvizkit.api import (
    array_to_compressed,
    array_to_image,
    compressed_to_array,
    image_to_array,
    region_of_interest,
)
from rosvizkit.core.encoding import (
    PixelFormat,
    UnsupportedEncodingError,
    encoding_channels,
    encoding_representation,
    encoding_to_pixel_format,
    reorder_pixels,
)
from rosvizkit.core.linalg import LUDecomposition, SingularMatrixError, lu_solve, matrix_decompose, matrix_inverse
from rosvizkit.core.projection import (
    pixel_to_image_plane,
    pixel_to_world_direction,
    pixels_in_world,
    pixels_to_world_directions,
)

__all__ = [
    "messages",
    "PixelFormat",
    "UnsupportedEncodingError",
    "encoding_channels",
    "encoding_representation",
    "encoding_to_pixel_format",
    "reorder_pixels",
    "LUDecomposition",
    "SingularMatrixError",
    "lu_solve",
    "matrix_decompose",
    "matrix_inverse",
    "pixel_to_image_plane",
    "pixel_to_world_direction",
    "pixels_in_world",
    "pixels_to_world_directions",
    "image_to_array",
    "compressed_to_array",
    "array_to_image",
    "array_to_compressed",
    "region_of_interest",
]
