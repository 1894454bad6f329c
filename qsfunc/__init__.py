from qsfunc.config import EnvironmentContext, OperationContext, ParamSet, UrlStyle
from qsfunc.builder import RequestBuilder, RequestDescriptor, SignatureState
from qsfunc.body import RequestBody
from qsfunc.session import url_session, send
from qsfunc import exceptions

__version__ = '0.1.0'
