"""
Allow running the package directly: python -m mandelbrot_progressive
"""
import logging
from argparse import ArgumentParser

from .app import run


def build_parser():
    parser = ArgumentParser(prog='mandelbrot_progressive',
                            description='Progressive Mandelbrot set viewer')

    parser.add_argument('--width', type=int, dest='width',
                        help='window width in pixels', metavar='WIDTH')
    parser.add_argument('--height', type=int, dest='height',
                        help='window height in pixels', metavar='HEIGHT')
    parser.add_argument('--max-iterations', type=int, dest='max_iter',
                        help='maximum number of iterations per point (10-1000)',
                        metavar='MAX_ITERATIONS')
    parser.add_argument('--color-scheme', type=int, dest='color_scheme',
                        help='colour scheme id: 0 Blue-Gold, 1 Fire, 2 Ocean, 3 Rainbow, 4 Grayscale',
                        metavar='SCHEME')
    parser.add_argument('--background', action='store_true',
                        help='compute passes on a worker thread')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='log every render pass')
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s %(name)s %(levelname)s: %(message)s',
    )
    run(args.width, args.height, args.max_iter, args.color_scheme, args.background)


if __name__ == "__main__":
    main()
