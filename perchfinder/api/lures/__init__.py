# perchfinder/api/lures/__init__.py
