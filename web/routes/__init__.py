"""
API 라우트 패키지

각 기능별 라우터 모듈:
- health: 헬스 체크
- balances: 그룹/멤버 순잔액
- debts: 상세 채무, 단순화, What-If
- settlements: 정산 기록 및 이력
"""
