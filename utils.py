"""
Diffing requirements:

- numpy
- opencv-python-headless (only for the optional PNG preview)
"""

import os
import time
from collections import namedtuple

import cv2
import numpy as np

import ppm
from ppm import ErrorKind, Image, ImageError

DifferenceStats = namedtuple('DifferenceStats', ['min', 'max', 'mean'])


def log_info(verbose, *args):
	if verbose is False:
		return
	print(*args)


def compare(a, b):
	"""
	Per-channel signed difference a - b.

	The difference image maps each channel to clamp(dif + 0.5, 0, 1), so equal
	channels come out mid-gray. The mean is taken over absolute differences.
	"""
	if (a.width != b.width or a.height != b.height or
		len(a.pixels) != len(b.pixels)):
		raise ImageError(ErrorKind.IMAGE_MISMATCH)

	dif = np.asarray(a.pixels, dtype=np.float64) - np.asarray(b.pixels, dtype=np.float64)
	difference = Image(a.width, a.height, np.clip(dif + 0.5, 0.0, 1.0))

	# min and max both start at zero, so a same-signed diff still reports 0
	# at one end. This is intentional and matches the old comparator output.
	dif_min, dif_max, dif_mean = 0.0, 0.0, 0.0
	if dif.size > 0:
		dif_min = min(dif_min, float(dif.min()))
		dif_max = max(dif_max, float(dif.max()))
		dif_mean = float(np.abs(dif).sum()) / dif.size

	return difference, DifferenceStats(dif_min, dif_max, dif_mean)


def difference_filename(timestamp=None):
	if timestamp is None:
		timestamp = time.time()
	return f'difference-{int(timestamp)}.ppm'


def write_png(path, image):
	"""
	Write a preview of a difference image; it is never gamma encoded.
	"""
	rgb = ppm.quantize(image.pixels, gamma=False).reshape((image.height, image.width, 3))
	if not cv2.imwrite(path, cv2.cvtColor(rgb, cv2.COLOR_RGB2BGR)):
		raise ImageError(ErrorKind.FILE_WRITE_FAILED, path)


def perform_diffing(original, new, result_path='.', gamma=True, png=False, verbose=False):
	"""
	Read both images, compare them, and write the difference image.

	Returns the path of the written PPM and the difference statistics.
	"""
	log_info(verbose, f'Reading {original}...')
	a = ppm.read_ppm(original, gamma)

	log_info(verbose, f'Reading {new}...')
	b = ppm.read_ppm(new, gamma)

	log_info(verbose, f'Comparing {a.width}x{a.height} images...')
	difference, stats = compare(a, b)

	output = os.path.join(result_path, difference_filename())
	log_info(verbose, f'Writing {output}')
	ppm.write_ppm(output, difference.width, difference.height, difference.pixels, gamma=False)

	if png:
		preview = os.path.splitext(output)[0] + '.png'
		log_info(verbose, f'Writing {preview}')
		write_png(preview, difference)

	return output, stats
