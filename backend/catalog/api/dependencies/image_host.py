from catalog.integrations.cloudinary.client import CloudinaryClient, ImageHostProtocol


def get_image_host() -> ImageHostProtocol:
    return CloudinaryClient()
