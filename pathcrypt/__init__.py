from .main import pathcrypt, cli, main
from .secret import PassphraseUnavailable, SecretPassphrase
from .api_files import *
from .api_strings import *
from .api_media import *
from .api_system import *
from .version import __version__

FileResult = pathcrypt.FileResult
Outcome = pathcrypt.Outcome
ErrorKind = pathcrypt.ErrorKind
PathcryptError = pathcrypt.PathcryptError
MalformedEnvelope = pathcrypt.MalformedEnvelope
DecryptionFailed = pathcrypt.DecryptionFailed
AllCharactersExcluded = pathcrypt.AllCharactersExcluded
TranscoderUnavailable = pathcrypt.TranscoderUnavailable
