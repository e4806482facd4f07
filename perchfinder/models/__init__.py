# perchfinder/models/__init__.py
