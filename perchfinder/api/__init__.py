# perchfinder/api/__init__.py
