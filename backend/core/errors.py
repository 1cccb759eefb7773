"""
标准错误码体系
提供统一的错误码定义和异常处理
"""

import logging
from typing import Optional, Any, Dict
from enum import IntEnum
from fastapi import status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ErrorCode(IntEnum):
    """
    标准错误码

    错误码规范：
    - 0: 成功
    - 1xxx: 系统级错误
    - 2xxx: 认证/授权错误
    - 3xxx: 业务通用错误
    - 4xxx: 模块级错误（各模块自定义）
    """

    # ==================== 成功 ====================
    SUCCESS = 0

    # ==================== 系统级错误 (1xxx) ====================
    INTERNAL_ERROR = 1000           # 服务器内部错误
    DATABASE_ERROR = 1001           # 数据库错误

    # ==================== 认证/授权错误 (2xxx) ====================
    UNAUTHORIZED = 2001             # 未认证（未登录）
    TOKEN_INVALID = 2003            # 令牌无效
    PERMISSION_DENIED = 2004        # 权限不足
    ACCOUNT_DISABLED = 2005         # 账户已禁用
    LOGIN_FAILED = 2007             # 登录失败

    # ==================== 业务通用错误 (3xxx) ====================
    VALIDATION_ERROR = 3001         # 参数验证失败
    RESOURCE_NOT_FOUND = 3002       # 资源不存在
    RESOURCE_CONFLICT = 3004        # 资源冲突（并发修改）
    OPERATION_FAILED = 3005         # 操作失败
    INVALID_OPERATION = 3006        # 无效操作

    # ==================== 模块级错误 (4xxx) ====================
    # 4200-4299: 菜单模块
    MENU_NOT_FOUND = 4201
    MENU_PARENT_NOT_FOUND = 4202
    MENU_CYCLE_VIOLATION = 4203
    MENU_HAS_CHILDREN = 4204


# 错误码对应的默认消息
ERROR_MESSAGES: Dict[int, str] = {
    ErrorCode.SUCCESS: "操作成功",

    # 系统级
    ErrorCode.INTERNAL_ERROR: "服务器内部错误，请稍后重试",
    ErrorCode.DATABASE_ERROR: "数据库操作失败",

    # 认证/授权
    ErrorCode.UNAUTHORIZED: "请先登录",
    ErrorCode.TOKEN_INVALID: "无效的认证凭据",
    ErrorCode.PERMISSION_DENIED: "没有权限执行此操作",
    ErrorCode.ACCOUNT_DISABLED: "账户已被禁用",
    ErrorCode.LOGIN_FAILED: "用户名或密码错误",

    # 业务通用
    ErrorCode.VALIDATION_ERROR: "参数验证失败",
    ErrorCode.RESOURCE_NOT_FOUND: "请求的资源不存在",
    ErrorCode.RESOURCE_CONFLICT: "数据已被其他请求修改，请刷新后重试",
    ErrorCode.OPERATION_FAILED: "操作失败",
    ErrorCode.INVALID_OPERATION: "无效的操作",

    # 菜单模块
    ErrorCode.MENU_NOT_FOUND: "菜单不存在",
    ErrorCode.MENU_PARENT_NOT_FOUND: "父菜单不存在",
    ErrorCode.MENU_CYCLE_VIOLATION: "不能将菜单移动到其子菜单下，这会导致循环引用",
    ErrorCode.MENU_HAS_CHILDREN: "该菜单下有子菜单，不能直接删除",
}

# 错误码对应的 HTTP 状态码
ERROR_HTTP_STATUS: Dict[int, int] = {
    ErrorCode.SUCCESS: status.HTTP_200_OK,

    # 系统级 -> 500
    ErrorCode.INTERNAL_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.DATABASE_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,

    # 认证/授权 -> 401/403
    ErrorCode.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.TOKEN_INVALID: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.PERMISSION_DENIED: status.HTTP_403_FORBIDDEN,
    ErrorCode.ACCOUNT_DISABLED: status.HTTP_403_FORBIDDEN,
    ErrorCode.LOGIN_FAILED: status.HTTP_401_UNAUTHORIZED,

    # 业务通用 -> 400/404/409
    ErrorCode.VALIDATION_ERROR: status.HTTP_400_BAD_REQUEST,
    ErrorCode.RESOURCE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.RESOURCE_CONFLICT: status.HTTP_409_CONFLICT,
    ErrorCode.OPERATION_FAILED: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_OPERATION: status.HTTP_400_BAD_REQUEST,

    # 菜单模块
    ErrorCode.MENU_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.MENU_PARENT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.MENU_CYCLE_VIOLATION: status.HTTP_400_BAD_REQUEST,
    ErrorCode.MENU_HAS_CHILDREN: status.HTTP_400_BAD_REQUEST,
}


class AppException(Exception):
    """
    应用异常基类

    用于抛出业务异常，包含错误码和详细信息

    Usage:
        raise AppException(ErrorCode.RESOURCE_NOT_FOUND, "菜单不存在")
        raise AppException(ErrorCode.VALIDATION_ERROR, data={"field": "name", "error": "不能为空"})
    """

    def __init__(
        self,
        code: int = ErrorCode.INTERNAL_ERROR,
        message: Optional[str] = None,
        data: Any = None
    ):
        self.code = code
        self.message = message or ERROR_MESSAGES.get(code, "未知错误")
        self.data = data
        self.http_status = ERROR_HTTP_STATUS.get(code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        super().__init__(self.message)

    def to_response(self) -> JSONResponse:
        """转换为 JSONResponse"""
        return JSONResponse(status_code=self.http_status, content=self.to_dict())

    def to_dict(self) -> dict:
        """转换为字典"""
        return error_response(self.code, self.message, self.data)


class AuthException(AppException):
    """认证异常"""

    def __init__(
        self,
        code: int = ErrorCode.UNAUTHORIZED,
        message: Optional[str] = None
    ):
        super().__init__(code=code, message=message)


class NotFoundException(AppException):
    """资源不存在异常"""

    def __init__(
        self,
        resource: str = "资源",
        resource_id: Any = None,
        code: int = ErrorCode.RESOURCE_NOT_FOUND
    ):
        message = f"{resource}不存在"
        if resource_id:
            message = f"{resource} (ID: {resource_id}) 不存在"
        super().__init__(code=code, message=message)


class PermissionException(AppException):
    """权限异常"""

    def __init__(self, message: str = "没有权限执行此操作"):
        super().__init__(
            code=ErrorCode.PERMISSION_DENIED,
            message=message
        )


class BusinessException(AppException):
    """业务异常"""

    def __init__(
        self,
        code: int = ErrorCode.OPERATION_FAILED,
        message: Optional[str] = None,
        data: Any = None
    ):
        super().__init__(code=code, message=message, data=data)


class ConflictException(AppException):
    """并发修改冲突"""

    def __init__(self, message: Optional[str] = None):
        super().__init__(code=ErrorCode.RESOURCE_CONFLICT, message=message)


# ==================== 异常处理器 ====================

async def app_exception_handler(request, exc: AppException):
    """AppException 异常处理器"""
    return exc.to_response()


def register_exception_handlers(app):
    """
    注册异常处理器

    在 main.py 中调用：
        from core.errors import register_exception_handlers
        register_exception_handlers(app)
    """
    from fastapi.exceptions import RequestValidationError
    from starlette.exceptions import HTTPException as StarletteHTTPException

    app.add_exception_handler(AppException, app_exception_handler)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request, exc: RequestValidationError):
        errors = []
        for error in exc.errors():
            errors.append({
                "field": ".".join(str(loc) for loc in error["loc"]),
                "message": error["msg"],
                "type": error["type"]
            })

        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=error_response(ErrorCode.VALIDATION_ERROR, data={"errors": errors})
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request, exc: StarletteHTTPException):
        # 映射 HTTP 状态码到业务错误码
        code_mapping = {
            401: ErrorCode.UNAUTHORIZED,
            403: ErrorCode.PERMISSION_DENIED,
            404: ErrorCode.RESOURCE_NOT_FOUND,
            405: ErrorCode.INVALID_OPERATION,
            500: ErrorCode.INTERNAL_ERROR,
        }

        code = code_mapping.get(exc.status_code, ErrorCode.INTERNAL_ERROR)
        message = str(exc.detail) if exc.detail else ERROR_MESSAGES.get(code, "请求失败")

        return JSONResponse(
            status_code=exc.status_code,
            content=error_response(code, message),
            headers=getattr(exc, "headers", None)
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request, exc: Exception):
        logger.error(f"未处理异常: {exc}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_response(ErrorCode.INTERNAL_ERROR)
        )


# ==================== 响应构建器 ====================

def success_response(
    data: Any = None,
    message: str = "操作成功"
) -> dict:
    """构建成功响应"""
    return {
        "ok": True,
        "code": ErrorCode.SUCCESS,
        "message": message,
        "data": data
    }


def error_response(
    code: int = ErrorCode.INTERNAL_ERROR,
    message: Optional[str] = None,
    data: Any = None
) -> dict:
    """构建错误响应"""
    return {
        "ok": False,
        "code": int(code),
        "message": message or ERROR_MESSAGES.get(code, "操作失败"),
        "data": data
    }
