"""
App layer: 프로세스 호스트 (FastAPI).

역할:
- 설정 로드, 컴포넌트 생성 (components.py)
- 백그라운드 task 시작/정지 (lifespan)
- 좁은 HTTP 표면: 프리뷰 다운로드, 라이브 프리뷰, 사이트 생성
- ⚠️ 운영 로직 없음 (core/render/sites/templates에 위임)
"""
