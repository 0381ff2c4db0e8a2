from keypair_resource.handler import KeyPairResourceHandler, lambda_handler

__all__ = ["KeyPairResourceHandler", "lambda_handler"]
