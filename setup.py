"""Build configuration for Grid Sheet Maker.

Usage:
    pip install -e .[test]        # development install
    python setup.py py2app        # macOS only, produces dist/Grid Sheet.app
"""
import sys

from setuptools import setup

APP = ['grid_app.py']
DATA_FILES = []
OPTIONS = {
    'argv_emulation': False,  # must be False for Qt apps
    'plist': {
        'CFBundleName': 'Grid Sheet',
        'CFBundleDisplayName': 'Grid Sheet',
        'CFBundleIdentifier': 'com.gridsheet.app',
        'CFBundleVersion': '1.0.0',
        'CFBundleShortVersionString': '1.0',
        'LSMinimumSystemVersion': '11.0',
        'NSHighResolutionCapable': True,
        'CFBundleDocumentTypes': [{
            'CFBundleTypeName': 'Image',
            'CFBundleTypeRole': 'Viewer',
            'LSHandlerRank': 'Alternate',
            'LSItemContentTypes': ['public.image'],
        }],
    },
    'packages': ['PySide6', 'PIL'],
    'strip': False,  # avoid "Operation not permitted" on macOS SIP-protected binaries
}

py2app_kwargs = {}
if 'py2app' in sys.argv:
    py2app_kwargs = dict(
        app=APP,
        data_files=DATA_FILES,
        options={'py2app': OPTIONS},
        setup_requires=['py2app'],
    )

setup(
    name='grid-sheet-maker',
    version='1.0.0',
    description='Repeat one image in a grid and export a printable PDF with cut lines',
    python_requires='>=3.10',
    py_modules=[
        'grid_app', 'controller', 'views', 'models', 'grid',
        'image_loader', 'pdf_export', 'errors',
    ],
    install_requires=['PySide6', 'Pillow'],
    extras_require={'test': ['pytest', 'pytest-qt']},
    entry_points={'gui_scripts': ['grid-sheet-maker = grid_app:main']},
    **py2app_kwargs,
)
