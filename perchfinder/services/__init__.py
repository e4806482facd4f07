# perchfinder/services/__init__.py
