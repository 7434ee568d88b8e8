"""
どこで: `engine` パッケージ。
何を: 出力プリミティブと幾何計算の中核（`engine.core`）。
"""
