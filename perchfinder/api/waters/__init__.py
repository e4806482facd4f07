# perchfinder/api/waters/__init__.py
