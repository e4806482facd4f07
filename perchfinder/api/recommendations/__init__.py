# perchfinder/api/recommendations/__init__.py
