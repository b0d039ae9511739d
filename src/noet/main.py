# SPDX-License-Identifier: GPL-3.0-or-later

import argparse
import logging
import os
import sys

from noet import __version__


def main(argv=None):
    argv = list(sys.argv if argv is None else argv)
    parser = argparse.ArgumentParser(prog='noet', add_help=False)
    parser.add_argument('--debug', action='store_true')
    args, remaining = parser.parse_known_args(argv[1:])

    debug = args.debug or bool(os.environ.get('NOET_DEBUG'))
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    from noet.application import NoetApp
    app = NoetApp(version=__version__)
    return app.run([argv[0]] + remaining)


if __name__ == '__main__':
    sys.exit(main())
