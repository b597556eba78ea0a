### Description ###
# Shakti - Loan Recovery Management Platform
# - Access Log Model -
# Author: Shakti Platform Team
# Date: 10/16/2026
# Python: 3.11
####################

"""
Access Log Model

Records API requests for audit:
- Who: principal, role and tenant behind the session token
- Where: request host (tenant subdomain or root domain)
- What: HTTP method, path, response status
- When: Timestamp
- How long: Response time
"""

from datetime import datetime

from sqlalchemy import Column, DateTime, Float, Index, Integer, String

from shakti.database import Base

LOGIN_PATH_SUFFIX = "/auth/login"

_CLIPPED = {"host": 255, "query_string": 1000, "client_ip": 45, "user_agent": 500}


class AccessLog(Base):
    """
    Access log model - records API request/response details.

    Used for:
    - Security auditing (including failed logins)
    - Debugging/troubleshooting
    """

    __tablename__ = "access_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Request identification
    request_id = Column(String(36), nullable=False)  # UUID for correlation

    # Who made the request (kept as plain ids so logs outlive deleted rows)
    principal_id = Column(Integer, nullable=True)
    principal_role = Column(String(20), nullable=True)
    tenant_id = Column(Integer, nullable=True)

    # Request details
    host = Column(String(255), nullable=True)
    method = Column(String(10), nullable=False)  # GET, POST, etc.
    path = Column(String(500), nullable=False)  # /api/v1/auth/login
    query_string = Column(String(1000), nullable=True)  # ?page=1&page_size=10
    client_ip = Column(String(45), nullable=True)  # IPv4 or IPv6
    user_agent = Column(String(500), nullable=True)

    # Response details
    status_code = Column(Integer, nullable=False)
    response_time_ms = Column(Float, nullable=True)  # Response time in milliseconds

    # Timestamp
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    # Indexes for common queries
    __table_args__ = (
        Index("ix_access_logs_principal_created", "principal_role", "principal_id", "created_at"),
        Index("ix_access_logs_tenant_created", "tenant_id", "created_at"),
        Index("ix_access_logs_path_created", "path", "created_at"),
    )

    def __repr__(self):
        who = f"{self.principal_role}:{self.principal_id}" if self.principal_id else "anonymous"
        return f"<AccessLog({self.method} {self.path} {self.status_code} by {who})>"

    @property
    def is_login_attempt(self) -> bool:
        return self.method == "POST" and self.path.endswith(LOGIN_PATH_SUFFIX)

    @classmethod
    def for_request(
        cls,
        request_id: str,
        method: str,
        path: str,
        status_code: int,
        response_time_ms: float,
        identity=None,
        **request_meta,
    ) -> "AccessLog":
        """
        Build an uncommitted entry, attributing it to a SessionIdentity when one is known.

        request_meta may carry host, query_string, client_ip and user_agent;
        over-long values are clipped to their column widths.
        """
        meta = {
            key: value[:_CLIPPED[key]] if isinstance(value, str) else value
            for key, value in request_meta.items()
            if value
        }
        return cls(
            request_id=request_id,
            method=method,
            path=path[:500],
            status_code=status_code,
            response_time_ms=round(response_time_ms, 2),
            principal_id=identity.principal_id if identity else None,
            principal_role=identity.role if identity else None,
            tenant_id=identity.tenant_id if identity else None,
            **meta,
        )
