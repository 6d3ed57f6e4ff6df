"""图像预处理"""
from .preprocessor import ImagePreprocessor
from .normalization import stretch_contrast, get_intensity_window, rescale_to_uint8
