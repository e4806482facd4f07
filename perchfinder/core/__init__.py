# perchfinder/core/__init__.py
