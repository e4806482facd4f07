# perchfinder/data/__init__.py
