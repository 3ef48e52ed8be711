#!/usr/bin/env python3
"""Grid Sheet Maker - Repeat one image in a grid and export a printable PDF with cut lines."""

import argparse
import logging
import sys

from controller import MainWindow, GridApp


# === Entry Point ===

def main():
    parser = argparse.ArgumentParser(description="Grid Sheet Maker")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("image", nargs="?", default=None, help="Open an image file")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.debug else logging.WARNING)

    app = GridApp(sys.argv)
    app.setApplicationName("Grid Sheet Maker")
    window = MainWindow()
    window.show()

    # Connect macOS file-open events (image dropped on the Dock icon)
    app.file_open_requested.connect(window.load_image_file)

    if args.image:
        window.load_image_file(args.image)

    sys.exit(app.exec())


if __name__ == "__main__":
    main()
