"""
Flowchart prompt synthesis.

Renders the extraction instruction sent to the completion service. The
function is pure: the same hypotheses always produce the same prompt string.
"""

from typing import Sequence

from flowchart_api.schemas.flowchart import HypothesisInput

BLOCK_SEPARATOR = "\n---\n"

_PREAMBLE = (
    "あなたは熟練した理学療法士です。以下の仮説と、それぞれに関連付けられた評価所見のリストを分析し、"
    "フローチャートとして構造化してください。\n\n"
    "提供された各「仮説」に対して、'problem'タイプの親ノードを1つ作成してください。\n"
    "その仮説に紐づく各「評価所見」について、改行(\\n)で区切られた各行を独立した'finding'タイプの子ノードとして作成し、"
    "対応する親（仮説）ノードに接続してください。\n\n"
    "入力データ:\n"
    "---\n"
)

_OUTPUT_CONTRACT = (
    "\n---\n\n"
    "このフローチャート構造を表すJSONオブジェクトを生成してください。\n"
    '- JSONには "nodes" という単一のキーが含まれている必要があります。\n'
    '- "nodes" は、フローチャート内の各ノードを表すオブジェクトの配列です。\n'
    "- 各ノードには、一意の 'id' (例: \"problem-1\", \"finding-1-1\")、'label'、"
    "'type' ('problem' または 'finding')、そして 'parentId' が必要です。\n"
    "- 仮説から生成されるノード（'problem' type）の 'parentId' は null にしてください。\n"
    "- 所見から生成されるノード（'finding' type）には、接続先の仮説ノードの 'id' を "
    "'parentId' として設定してください。"
)


def render_hypothesis_block(index: int, item: HypothesisInput) -> str:
    """One labelled block; ``index`` is 1-based. Findings pass through verbatim."""
    return f"\n仮説 {index}: {item.hypothesis}\n関連所見:\n{item.findings}\n"


def build_flowchart_prompt(hypotheses: Sequence[HypothesisInput]) -> str:
    blocks = [
        render_hypothesis_block(i, item)
        for i, item in enumerate(hypotheses, start=1)
    ]
    return _PREAMBLE + BLOCK_SEPARATOR.join(blocks) + _OUTPUT_CONTRACT
