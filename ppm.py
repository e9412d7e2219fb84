"""
Binary PPM (P6) reading and writing.

Pixels are held as a flat numpy float array of [0,1] channel values, three per
pixel, row-major. Only 8-bit channels are supported (maxval 1..255).
"""

import enum
from collections import namedtuple

import numpy as np

GAMMA = 0.45
MAXVAL = 255
IMAGE_COMMENT = '# PPM-Comparator Python'

# largest width * height * 3 a header may describe
MAX_CHANNELS = 2 ** 31 - 1

NUMBER_CHARS = b'0123456789+-.eE'


class ErrorKind(enum.Enum):
	IMAGE_MISMATCH = 'images not the same size'
	FILE_NOT_FOUND = 'file not found'
	FORMAT_INVALID = 'image format invalid'
	FILE_INCOMPLETE = 'image file incomplete'
	DIMENSIONS_INVALID = 'image dimensions invalid'
	FILE_WRITE_FAILED = 'file write failed'


class ImageError(ValueError):
	"""
	Raised for anything that stops an image from being read, compared or written.
	"""

	def __init__(self, kind, path=None):
		self.kind = kind
		self.path = path
		message = kind.value if path is None else f'{kind.value}: {path}'
		super().__init__(message)


Image = namedtuple('Image', ['width', 'height', 'pixels'])


def gamma_decode(values):
	return np.power(values, 1.0 / GAMMA)


def gamma_encode(values):
	return np.power(values, GAMMA)


def check_validity(width, height, maxval, path):
	"""
	Header values must be whole numbers, and width * height * 3 must fit a
	signed 32-bit int.
	"""
	try:
		whole = all(v == int(v) for v in (width, height, maxval))
	except (TypeError, ValueError, OverflowError):
		whole = False

	if (not whole or
		width < 1 or height < 1 or
		height > MAX_CHANNELS / 3 or width > MAX_CHANNELS / (height * 3) or
		maxval < 1 or maxval > MAXVAL):
		raise ImageError(ErrorKind.DIMENSIONS_INVALID, path)


class HeaderReader:
	"""
	Byte cursor over the text part of a PPM header, with one byte of lookahead.
	"""

	def __init__(self, stream, path):
		self.stream = stream
		self.path = path
		self.lookahead = None

	def peek(self):
		if self.lookahead is None:
			self.lookahead = self.stream.read(1)
		return self.lookahead

	def consume(self):
		c = self.peek()
		self.lookahead = None
		return c

	def read(self, size):
		"""
		Read raw bytes, starting with any byte still held in the lookahead.
		"""
		head = b''
		if self.lookahead is not None:
			head, self.lookahead = self.lookahead, None
			size -= len(head)
		if size <= 0:
			return head
		return head + self.stream.read(size)

	def skip_blanks(self):
		while True:
			c = self.peek()
			if not c:
				raise ImageError(ErrorKind.FILE_INCOMPLETE, self.path)
			if c.isspace():
				self.consume()
			elif c == b'#':
				# a comment runs up to and including the next newline
				while c and c != b'\n':
					c = self.consume()
			else:
				return

	def read_number(self):
		self.skip_blanks()

		literal = b''
		while self.peek() and self.peek() in NUMBER_CHARS:
			literal += self.consume()

		try:
			return int(literal)
		except ValueError:
			pass
		try:
			return float(literal)
		except ValueError:
			pass
		if not self.peek():
			raise ImageError(ErrorKind.FILE_INCOMPLETE, self.path)
		raise ImageError(ErrorKind.DIMENSIONS_INVALID, self.path)


def read_ppm_stream(stream, path='<stream>', gamma=True):
	"""
	Decode a P6 image from a binary file object.

	Bytes after the pixel data are ignored.
	"""
	if stream.read(2) != b'P6':
		raise ImageError(ErrorKind.FORMAT_INVALID, path)

	header = HeaderReader(stream, path)
	width = header.read_number()
	height = header.read_number()
	maxval = header.read_number()

	# single separator before the raster, whatever byte it is
	header.read(1)

	check_validity(width, height, maxval, path)
	width, height = int(width), int(height)

	size = width * height * 3
	data = header.read(size)
	if len(data) < size:
		raise ImageError(ErrorKind.FILE_INCOMPLETE, path)

	pixels = np.frombuffer(data, dtype=np.uint8).astype(np.float64) / 255.0
	if gamma:
		pixels = gamma_decode(pixels)

	return Image(width, height, pixels)


def read_ppm(path, gamma=True):
	"""
	Read a P6 file into [0,1] float pixels, gamma decoding them unless told not to.
	"""
	try:
		stream = open(path, 'rb')
	except OSError as err:
		raise ImageError(ErrorKind.FILE_NOT_FOUND, path) from err

	with stream:
		return read_ppm_stream(stream, path, gamma)


def quantize(pixels, gamma=True):
	channels = np.clip(np.asarray(pixels, dtype=np.float64), 0.0, 1.0)
	if gamma:
		channels = gamma_encode(channels)
	return np.floor(channels * MAXVAL + 0.5).astype(np.uint8)


def write_ppm_stream(stream, width, height, pixels, gamma=True, path='<stream>'):
	check_validity(width, height, MAXVAL, path)
	if len(pixels) != width * height * 3:
		raise ImageError(ErrorKind.DIMENSIONS_INVALID, path)

	header = f'P6\n{IMAGE_COMMENT}\n{width} {height}\n{MAXVAL}\n'
	try:
		stream.write(header.encode('ascii'))
		stream.write(quantize(pixels, gamma).tobytes())
	except OSError as err:
		raise ImageError(ErrorKind.FILE_WRITE_FAILED, path) from err


def write_ppm(path, width, height, pixels, gamma=True):
	"""
	Write [0,1] float pixels as a P6 file. Values outside [0,1] are clamped.
	"""
	check_validity(width, height, MAXVAL, path)
	if len(pixels) != width * height * 3:
		raise ImageError(ErrorKind.DIMENSIONS_INVALID, path)

	try:
		stream = open(path, 'wb')
	except OSError as err:
		raise ImageError(ErrorKind.FILE_WRITE_FAILED, path) from err

	with stream:
		write_ppm_stream(stream, width, height, pixels, gamma, path)
		try:
			stream.flush()
		except OSError as err:
			raise ImageError(ErrorKind.FILE_WRITE_FAILED, path) from err
