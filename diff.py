"""
Compare two binary PPM (P6) images and write a difference image.

Both images are read as [0,1] pixels. The min, max and mean of image1 - image2
are printed, and the difference image (image1 - image2 + 128) is written to
difference-<unix time>.ppm.
"""

import sys
import argparse

import utils
from ppm import ImageError

BANNER = '\n  PPM Comparator\n'

parser = argparse.ArgumentParser(
	prog='ppmcompare',
	description='Diff two binary PPM (P6) images.',
	epilog='Reads images as [0,1] pixels,\n'
		'gives min, max, mean differences,\n'
		'writes difference image of image1 - image2 + 128',
	formatter_class=argparse.RawDescriptionHelpFormatter,
	add_help=False,
)
parser.add_argument('original', nargs='?', help='The path for the first image.')
parser.add_argument('new', nargs='?', help='The path for the second image.')
parser.add_argument('-?', '--help', action='help', help='show this help message and exit.')
parser.add_argument('-r', '--result-path', default='.', help='Directory for the difference image. Defaults to the current directory.')
parser.add_argument('-n', '--no-gamma', action='store_true', help='do not gamma decode the input images.')
parser.add_argument('-p', '--png', action='store_true', help='also write the difference image as a PNG.')
parser.add_argument('-v', '--verbose', action='store_true', help='Log progress to stdout.')


def main(argv=None):
	args = parser.parse_args(argv)

	if args.original is None:
		parser.print_help()
		return 0
	if args.new is None:
		parser.error('two image paths are required')

	print(BANNER)

	try:
		output, stats = utils.perform_diffing(
			args.original,
			args.new,
			result_path=args.result_path,
			gamma=not args.no_gamma,
			png=args.png,
			verbose=args.verbose,
		)
	except ImageError as err:
		print(f'error: {err}', file=sys.stderr)
		return 1

	utils.log_info(args.verbose, f'difference image written to {output}')
	print(f'min:  {stats.min}')
	print(f'max:  {stats.max}')
	print(f'mean: {stats.mean}')
	return 0


if __name__ == '__main__':
	sys.exit(main())
