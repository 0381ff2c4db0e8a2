from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from keypair_resource.models import KeyMaterial

PUBLIC_EXPONENT = 65537
KEY_SIZE = 2048


def generate_key_pair():
    """Generate an RSA key pair as SPKI (public) and PKCS#1 (private) PEM text."""
    key = rsa.generate_private_key(public_exponent=PUBLIC_EXPONENT, key_size=KEY_SIZE)
    private_pem = key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption()
    ).decode('utf-8')

    public_pem = key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo
    ).decode('utf-8')

    return KeyMaterial(public_key=public_pem, private_key=private_pem)
