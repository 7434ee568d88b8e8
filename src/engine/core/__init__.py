"""
どこで: `engine.core` サブパッケージ。
何を: 描画プリミティブ（Primitive/PrimitiveBuffer）と幾何ユーティリティを提供。
なぜ: 可視化ビルダ群（`visual`）の計算基盤を構成し、出力形式を一箇所に固定するため。
"""
