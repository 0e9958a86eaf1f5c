import numpy as np

from mirage_tank.models.image import Image, GrayImage


def gray(values) -> GrayImage:
    arr = np.array(values, dtype=np.uint8)
    if arr.ndim == 0:
        arr = arr.reshape(1, 1)
    return GrayImage(arr)


def rgb(values) -> Image:
    arr = np.array(values, dtype=np.uint8)
    if arr.ndim == 1:
        arr = arr.reshape(1, 1, 3)
    return Image(arr)
