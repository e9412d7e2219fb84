import pytest


def ppm_bytes(width, height, data, header=None):
	if header is None:
		header = f'P6 {width} {height} 255\n'
	return header.encode('ascii') + bytes(data)


@pytest.fixture
def make_ppm(tmp_path):
	"""
	Write a raw P6 file into tmp_path and return its path as a string.
	"""
	def make(name, width, height, data, header=None):
		path = tmp_path / name
		path.write_bytes(ppm_bytes(width, height, data, header))
		return str(path)
	return make
