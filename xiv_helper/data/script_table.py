"""Static Traditional/Simplified character substitution table.

Each token is a ``<traditional><simplified>`` pair. Several traditional
characters share one simplified form (髮/發 -> 发, 乾/幹 -> 干, 麵/面 -> 面);
the reverse table keeps the first pair listed, so conversions are best-effort
and round trips are not guaranteed to return the input.
"""

from __future__ import annotations

_PAIRS = """
萬万 與与 專专 業业 叢丛 東东 絲丝 兩两 嚴严 喪丧 個个 豐丰 臨临 為为 麗丽 舉举
義义 烏乌 樂乐 喬乔 習习 鄉乡 書书 買买 亂乱 爭争 於于 虧亏 雲云 亞亚 產产 畝亩
親亲 億亿 僅仅 從从 侖仑 倉仓 儀仪 們们 價价 眾众 優优 夥伙 會会 傘伞 偉伟 傳传
傷伤 倫伦 偽伪 體体 餘余 傭佣 僉佥 俠侠 侶侣 僥侥 偵侦 側侧 僑侨 儈侩 儕侪 儂侬
儘尽 債债 傾倾 僂偻 僨偾 償偿 儲储 兒儿 兌兑 黨党 蘭兰 關关 興兴 茲兹 養养 獸兽
內内 岡冈 冊册 寫写 軍军 農农 馮冯 衝冲 決决 況况 凍冻 淨净 涼凉 減减 湊凑 凜凛
幾几 鳳凤 鳧凫 憑凭 凱凯 擊击 鑿凿 芻刍 劃划 劉刘 則则 剛刚 創创 刪删 別别 剎刹
劑剂 剮剐 劍剑 劇剧 勸劝 辦办 務务 勱劢 動动 勵励 勁劲 勞劳 勢势 勳勋 勻匀 匭匦
區区 醫医 華华 協协 單单 賣卖 盧卢 鹵卤 衛卫 卻却 廠厂 廳厅 曆历 厲厉 壓压 厭厌
厙厍 縣县 參参 雙双 發发 變变 敘叙 疊叠 葉叶 號号 嘆叹 嘰叽 嚇吓 呂吕 嗎吗 噸吨
聽听 啟启 吳吴 嘔呕 員员 鳴鸣 響响 啞哑 團团 園园 圍围 圖图 圓圆 聖圣 場场 壞坏
塊块 堅坚 壇坛 壩坝 墳坟 墜坠 壟垄 壘垒 墾垦 堊垩 執执 報报 壺壶 壽寿 夠够 夢梦
夾夹 奧奥 奪夺 奮奋 婦妇 媽妈 嫵妩 孫孙 學学 寧宁 寶宝 實实 寵宠 審审 憲宪 宮宫
寬宽 賓宾 寢寝 對对 尋寻 導导 將将 爾尔 塵尘 嘗尝 層层 屬属 歲岁 豈岂 島岛 嶺岭
嶽岳 崗岗 幣币 帥帅 師师 帳帐 帶带 幫帮 廣广 莊庄 慶庆 廬庐 庫库 應应 廟庙 廢废
開开 異异 棄弃 張张 彌弥 彎弯 強强 歸归 當当 錄录 彙汇 後后 徑径 從从 復复 徵征
憶忆 懷怀 態态 憐怜 總总 戀恋 惡恶 惱恼 懸悬 驚惊 憚惮 慘惨 慚惭 懶懒 憂忧 懇恳
戰战 戲戏 戶户 撲扑 執执 擴扩 掃扫 揚扬 擾扰 撫抚 搶抢 護护 報报 擔担 擬拟 攏拢
揀拣 擁拥 攔拦 擰拧 撥拨 擇择 掛挂 摯挚 攣挛 擋挡 擠挤 揮挥 撈捞 損损 撿捡 換换
擲掷 搖摇 攝摄 擺摆 攜携 擺摆 數数 斂敛 斃毙 齋斋 鬥斗 斬斩 斷断 無无 舊旧 時时
曠旷 晝昼 顯显 晉晋 曬晒 曉晓 暈晕 暫暂 術术 樸朴 機机 殺杀 雜杂 權权 條条 來来
楊杨 極极 構构 槍枪 棟栋 櫃柜 檸柠 標标 棧栈 欄栏 樹树 樣样 橋桥 檔档 梘枧 夢梦
檢检 樓楼 欖榄 槳桨 橢椭 橫横 歡欢 歐欧 殘残 殼壳 毀毁 氣气 氫氢 漢汉 湯汤 溝沟
沒没 灃沣 滬沪 淚泪 潑泼 澤泽 潔洁 灑洒 澆浇 濁浊 測测 濟济 渾浑 濃浓 塗涂 濤涛
澇涝 潤润 澀涩 漲涨 淵渊 漁渔 漸渐 溫温 遊游 灣湾 濕湿 滅灭 燈灯 靈灵 災灾 爐炉
點点 煉炼 爍烁 爛烂 烴烃 燭烛 煙烟 燒烧 熱热 煥焕 燦灿 營营 愛爱 爺爷 牆墙 狀状
猶犹 獅狮 獨独 獲获 貓猫 獵猎 獻献 現现 環环 瑪玛 琺珐 璽玺 瓏珑 瓊琼 甕瓮 電电
畫画 暢畅 療疗 瘡疮 瘋疯 癢痒 發发 皺皱 盞盏 鹽盐 監监 蓋盖 盤盘 眥眦 睜睁 瞭了
礦矿 碼码 磚砖 確确 禮礼 禍祸 離离 禿秃 種种 積积 稱称 穩稳 窮穷 竊窃 豎竖 競竞
筆笔 節节 範范 築筑 簡简 籃篮 籠笼 類类 糧粮 緊紧 糾纠 紅红 約约 級级 紀纪 紋纹
納纳 紐纽 純纯 紗纱 紙纸 紛纷 紡纺 線线 練练 組组 細细 織织 終终 絆绊 經经 結结
給给 絡络 絕绝 統统 絹绢 綁绑 綠绿 維维 綿绵 緞缎 緣缘 編编 縫缝 縮缩 繁繁 繩绳
繡绣 纖纤 續续 罈坛 罰罚 羅罗 羈羁 義义 聞闻 聯联 聰聪 聲声 職职 肅肃 腸肠 膚肤
腫肿 腦脑 腳脚 臉脸 艙舱 艦舰 藝艺 節节 莖茎 薦荐 藥药 蓮莲 獲获 萊莱 營营 蕭萧
薩萨 蘇苏 藍蓝 蘋苹 蟲虫 蝦虾 蠶蚕 螢萤 蠟蜡 衆众 補补 襯衬 襪袜 裝装 製制 複复
覆覆 見见 規规 視视 覺觉 覽览 觀观 觸触 計计 訂订 認认 討讨 讓让 訓训 記记 講讲
許许 論论 設设 訪访 證证 評评 識识 詞词 譯译 試试 詩诗 誠诚 話话 詳详 語语 誤误
說说 請请 諸诸 讀读 課课 誰谁 調调 談谈 謎谜 謝谢 謹谨 譜谱 貝贝 貞贞 負负 財财
貢贡 貧贫 貨货 販贩 貪贪 貫贯 責责 貯贮 貴贵 貸贷 費费 賀贺 資资 賊贼 賈贾 賄贿
賓宾 賜赐 賞赏 賠赔 賢贤 賬账 賭赌 賴赖 購购 贈赠 贊赞 贏赢 趕赶 趙赵 躍跃 踐践
蹤踪 軀躯 車车 軌轨 軒轩 軟软 輪轮 較较 載载 輔辅 輕轻 輝辉 輩辈 輸输 轉转 轟轰
辭辞 農农 邊边 遼辽 達达 遷迁 過过 邁迈 運运 還还 這这 進进 遠远 違违 連连 遲迟
適适 選选 遺遗 鄭郑 鄰邻 醜丑 釀酿 釋释 裡里 裏里 鑒鉴 針针 釘钉 釣钓 鈍钝 鈴铃
鉛铅 銀银 銅铜 鋁铝 銳锐 錯错 鋼钢 錢钱 錦锦 鍵键 鍋锅 鍛锻 鎖锁 鎧铠 鏈链 鏡镜
鐘钟 鍾钟 鐵铁 鑄铸 鑰钥 鑽钻 鑲镶 鑑鉴 鋒锋 錘锤 鋤锄 鏟铲 鉤钩 鈦钛 鉑铂 錫锡
鎢钨 鎳镍 鈷钴 銹锈 鏽锈 鍊炼 錠锭 門门 閃闪 閉闭 問问 閒闲 間间 閱阅 闆板 闊阔
隊队 陽阳 陰阴 陣阵 階阶 際际 陸陆 陳陈 險险 隨随 隱隐 隸隶 難难 雞鸡 電电 霧雾
靜静 韋韦 韌韧 頁页 頂顶 項项 順顺 須须 預预 領领 頭头 頸颈 頻频 題题 顏颜 額额
風风 颯飒 飄飘 飛飞 飯饭 飲饮 飾饰 飽饱 餅饼 餵喂 館馆 餚肴 饅馒 饌馔 馬马 駐驻
駕驾 騎骑 驗验 驅驱 驢驴 骯肮 體体 髮发 鬆松 鬍胡 魚鱼 魯鲁 鮮鲜 鯉鲤 鯨鲸 鰻鳗
鱈鳕 鱒鳟 鮭鲑 鯛鲷 鳥鸟 鴨鸭 鴿鸽 鵝鹅 鶴鹤 鷹鹰 鸚鹦 麥麦 麵面 黃黄 齊齐 齒齿
龍龙 龜龟 幹干 乾干 穀谷 醬酱 蔔卜 薑姜 蘿萝 蔥葱 燉炖 烤烤 餡馅 豬猪 雛雏 蠍蝎
礪砺 晶晶 壺壶 甌瓯 匯汇 擊击 靈灵 衛卫 禦御 護护 韁缰 轡辔 蹄蹄 鞍鞍 綢绸 緹缇
絨绒 氈毡 墊垫 寶宝 錶表 鐲镯 環环 墜坠 飾饰 鏈链 蝕蚀 礫砾 煤煤 燼烬 灰灰 隕陨
帶带 籤签 簽签 鑼锣 號号 綬绶 麼么 塢坞 鑾銮 銮銮
"""


def _build_tables() -> tuple[dict[str, str], dict[str, str]]:
    to_simplified: dict[str, str] = {}
    to_traditional: dict[str, str] = {}
    for pair in _PAIRS.split():
        if len(pair) != 2:
            raise ValueError(f"Malformed script pair: {pair!r}")
        trad, simp = pair[0], pair[1]
        if trad == simp:
            continue
        to_simplified.setdefault(trad, simp)
        to_traditional.setdefault(simp, trad)
    return to_simplified, to_traditional


TRADITIONAL_TO_SIMPLIFIED, SIMPLIFIED_TO_TRADITIONAL = _build_tables()

# Characters that only exist on one side of the table.
TRADITIONAL_ONLY = frozenset(TRADITIONAL_TO_SIMPLIFIED) - frozenset(SIMPLIFIED_TO_TRADITIONAL)
SIMPLIFIED_ONLY = frozenset(SIMPLIFIED_TO_TRADITIONAL) - frozenset(TRADITIONAL_TO_SIMPLIFIED)
