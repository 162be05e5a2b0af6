"""Foot mask extraction and pressure-map synthesis for glass footprint photos."""

from __future__ import annotations

import base64
import io
import logging
from typing import Optional, Union

import cv2
import numpy as np
from PIL import Image, UnidentifiedImageError
from scipy import ndimage
from skimage import exposure, util

from footprint.config import (
    BODY_BLUR_SIGMA,
    EDGE_BLUR_SIGMA,
    EDGE_THRESHOLD,
    MAX_FOREGROUND_PCT,
    PRESSURE_GAMMA,
)
from footprint.errors import InvalidImageError
from footprint.models import RawImage

ImageInput = Union[RawImage, Image.Image]

LAPLACIAN_KERNEL = np.array(
    [[0, -1, 0],
     [-1, 4, -1],
     [0, -1, 0]],
    dtype=np.float32,
)


def load_image(raw: RawImage) -> Image.Image:
    """Decode raw photo bytes, rejecting empty or undecodable input."""

    if raw is None or not raw.data or raw.size_bytes == 0:
        raise InvalidImageError("Invalid or empty image file")

    logging.debug("Decoding %s (%d bytes)", raw.filename, raw.size_bytes)
    try:
        pil_img = Image.open(io.BytesIO(raw.data))
        pil_img.load()
    except (UnidentifiedImageError, OSError) as exc:
        raise InvalidImageError(f"File is not a readable image: {raw.filename}") from exc

    if pil_img.width == 0 or pil_img.height == 0:
        raise InvalidImageError(f"Image has no pixels: {raw.filename}")
    return pil_img


def _as_pil(image: ImageInput) -> Image.Image:
    if isinstance(image, Image.Image):
        if image.width == 0 or image.height == 0:
            raise InvalidImageError("Image has no pixels")
        return image
    if isinstance(image, RawImage):
        return load_image(image)
    raise InvalidImageError(f"Unsupported image input: {type(image).__name__}")


def to_grey_array(pil_img: Image.Image) -> np.ndarray:
    """Single-channel uint8 array of the image."""

    if pil_img.mode != "L":
        pil_img = pil_img.convert("L")
    return np.array(pil_img, dtype=np.uint8)


def _binary_mask(grey: np.ndarray) -> np.ndarray:
    """Mean-threshold a greyscale array into a 0/255 mask with the foot white."""

    normalized = cv2.normalize(grey, None, 0, 255, cv2.NORM_MINMAX)
    threshold = int(np.clip(round(float(normalized.mean())), 0, 255))
    mask = np.where(normalized >= threshold, 255, 0).astype(np.uint8)

    white_pct = float(mask.mean()) / 255.0 * 100.0
    logging.debug("Mask threshold=%d, white=%.1f%%", threshold, white_pct)

    # A thresholded photo usually shows more background than foot
    if white_pct > MAX_FOREGROUND_PCT:
        logging.debug("Background classified as foreground; inverting mask")
        mask = 255 - mask
    return mask


def extract_mask(image: ImageInput) -> Image.Image:
    """Binary foot mask (foot = 255, background = 0) with the source dimensions.

    Raises:
        InvalidImageError: if the input is empty or cannot be decoded.
    """

    grey = to_grey_array(_as_pil(image))
    return Image.fromarray(_binary_mask(grey))


def _enhance_body(masked: np.ndarray) -> np.ndarray:
    """Blur, gamma, stretch and invert so that darker means more pressure."""

    body = cv2.GaussianBlur(masked, (0, 0), sigmaX=BODY_BLUR_SIGMA)
    body = exposure.adjust_gamma(body, gamma=PRESSURE_GAMMA)
    if body.max() > body.min():
        stretched = exposure.rescale_intensity(body, in_range="image", out_range=(0, 255))
        body = np.clip(np.rint(stretched), 0, 255).astype(np.uint8)
    return util.invert(body)


def _edge_overlay(masked: np.ndarray, edge_threshold: float) -> np.ndarray:
    """Near-white outline where the Laplacian response crosses the threshold."""

    soft = cv2.GaussianBlur(masked, (0, 0), sigmaX=EDGE_BLUR_SIGMA).astype(np.float32)
    response = ndimage.convolve(soft, LAPLACIAN_KERNEL, mode="nearest")
    return np.where(response >= edge_threshold, 255, 0).astype(np.uint8)


def synthesize_pressure_map(
    image: ImageInput,
    edge_threshold: float = EDGE_THRESHOLD,
    mask: Optional[Image.Image] = None,
) -> Image.Image:
    """Build a single-channel pressure image from a footprint photo.

    0 marks maximal pressure and 255 marks background; a thin white outline
    traces the foot boundary. Dimensions are preserved.

    Args:
        image: Raw photo bytes or a decoded PIL image.
        edge_threshold: Laplacian response needed for an outline pixel.
        mask: Mask already produced by ``extract_mask`` for this image;
            computed here when omitted.

    Returns:
        PIL image in mode ``L``.

    Raises:
        InvalidImageError: if the input is empty or cannot be decoded.
    """

    grey = to_grey_array(_as_pil(image))
    if mask is None:
        mask_arr = _binary_mask(grey)
    else:
        mask_arr = to_grey_array(mask)
        if mask_arr.shape != grey.shape:
            raise InvalidImageError(f"Mask size {mask.size} does not match image size {grey.shape[::-1]}")
    masked = np.where(mask_arr > 0, grey, 0).astype(np.uint8)

    body = _enhance_body(masked)
    edges = _edge_overlay(masked, edge_threshold)
    logging.debug("Edge overlay covers %d pixels", int(np.count_nonzero(edges)))

    # Lighten blend: the outline never darkens the pressure estimate
    pressure = np.maximum(body, edges)
    return Image.fromarray(pressure).convert("L")


def encode_png(pil_img: Image.Image) -> bytes:
    buffer = io.BytesIO()
    pil_img.save(buffer, format="PNG", optimize=True)
    return buffer.getvalue()


def encode_png_base64(pil_img: Image.Image) -> str:
    """Base64 PNG payload for the vision API."""

    return base64.b64encode(encode_png(pil_img)).decode("utf-8")
