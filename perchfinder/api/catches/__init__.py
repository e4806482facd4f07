# perchfinder/api/catches/__init__.py
