"""Short code generation and validation."""

import re
import secrets
import string


# Base62 characters (alphanumeric, case-sensitive)
BASE62_CHARS = string.ascii_letters + string.digits  # a-zA-Z0-9

MIN_CODE_LENGTH = 6
MAX_CODE_LENGTH = 8

_CODE_PATTERN = re.compile(r"[A-Za-z0-9]{%d,%d}" % (MIN_CODE_LENGTH, MAX_CODE_LENGTH))


def validate_code(code) -> bool:
    """Check whether a short code satisfies the lexical contract.
    
    A code is valid if it is 6 to 8 characters long and made only of ASCII
    letters and digits. Case is preserved and significant.
    
    Args:
        code: Candidate code
        
    Returns:
        True if valid
    """
    if not isinstance(code, str):
        return False
    return _CODE_PATTERN.fullmatch(code) is not None


class CodeGenerator:
    """Generate random short codes."""
    
    def __init__(self, length: int = MAX_CODE_LENGTH):
        """Initialize code generator.
        
        Args:
            length: Length of generated codes (6-8)
            
        Raises:
            ValueError: If length is outside the valid code range
        """
        if not MIN_CODE_LENGTH <= length <= MAX_CODE_LENGTH:
            raise ValueError(
                f"Code length must be between {MIN_CODE_LENGTH} and {MAX_CODE_LENGTH}, got {length}"
            )
        self.length = length
    
    def generate(self) -> str:
        """Generate a candidate short code.
        
        Uses the OS CSPRNG; 62^8 possible codes at the default length keeps
        collisions rare, and the allocator retries the ones that happen.
        
        Returns:
            Random short code
        """
        return "".join(secrets.choice(BASE62_CHARS) for _ in range(self.length))
