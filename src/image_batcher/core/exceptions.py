"""项目内使用的自定义异常定义。"""


class ImageBatcherError(Exception):
    """基础异常类型。"""


class InvalidConfigurationError(ImageBatcherError):
    """配置不合法时抛出。"""


class UnsupportedFormatError(InvalidConfigurationError):
    """目标扩展名无法映射到可编码的容器格式。"""


class DirectoryProvisioningError(ImageBatcherError):
    """输出目录无法创建，整个任务必须中止。"""


class ImageLoadingError(ImageBatcherError):
    """图片解码失败。"""


class ImageWriteError(ImageBatcherError):
    """编码或写入输出文件失败。"""


class ImageConversionError(ImageBatcherError):
    """像素模式转换失败。"""
