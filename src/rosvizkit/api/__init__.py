from rosvizkit.api.image_conversion import (
    array_to_compressed,
    array_to_image,
    compressed_to_array,
    image_to_array,
    region_of_interest,
)

__all__ = [
    "image_to_array",
    "compressed_to_array",
    "array_to_image",
    "array_to_compressed",
    "region_of_interest",
]
